import pytest
from fastapi.testclient import TestClient

from webcraft.builder.store import ConversationStore
from webcraft.config.settings import Settings, get_settings
from webcraft.errors import RemoteCallFailure
from webcraft.llm.agent import SiteBuilderAgent
from webcraft.server.dependencies import build_agent, get_agent
from webcraft.server.main import app
from webcraft.server.preview import render_document

ANSWERS = ["bakery", "Sweet Co", "pastel pink", "a cozy neighborhood bakery site"]
PAGE = "<section class=\"container mx-auto px-4\"><h1>Sweet Co</h1><p>Fresh every morning.</p></section>"


class StubClient:
    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    async def complete(self, prompt, history=()):
        self.calls.append(prompt)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def make_client():
    def _make(agent: SiteBuilderAgent) -> TestClient:
        app.dependency_overrides[get_agent] = lambda: agent
        app.dependency_overrides[get_settings] = lambda: Settings(openai_api_key="sk-test")
        return TestClient(app)

    yield _make
    app.dependency_overrides.clear()


def _answer_all(client: TestClient, conversation_id: str):
    response = None
    for answer in ANSWERS:
        response = client.post(f"/api/conversations/{conversation_id}/answers", json={"answer": answer})
        assert response.status_code == 200
    return response.json()


def test_builder_page(make_client) -> None:
    client = make_client(SiteBuilderAgent(ConversationStore(), client=StubClient()))
    response = client.get("/")
    assert response.status_code == 200
    assert 'sandbox="allow-scripts"' in response.text


def test_health_reports_configuration(make_client) -> None:
    client = make_client(SiteBuilderAgent(ConversationStore(), client=StubClient()))
    body = client.get("/api/health").json()
    assert body["configured"] is True
    assert body["status"] == "healthy"

    client = make_client(SiteBuilderAgent(ConversationStore(), client=None, configuration_error="missing key"))
    body = client.get("/api/health").json()
    assert body["configured"] is False
    assert body["message"] == "missing key"


def test_build_agent_without_key_blocks_generation() -> None:
    agent = build_agent(Settings(openai_api_key=None), ConversationStore())
    assert not agent.configured
    assert "OPENAI_API_KEY" in agent.configuration_error


def test_full_flow_over_http(make_client) -> None:
    stub = StubClient(PAGE)
    client = make_client(SiteBuilderAgent(ConversationStore(), client=stub))

    created = client.post("/api/conversations").json()
    assert created["status"]["step"] == 0
    assert created["turns"][0]["kind"] == "question"
    assert created["selected"] is True

    detail = _answer_all(client, created["id"])
    assert detail["status"]["step"] == 4
    assert detail["status"]["succeeded"] is True
    assert detail["title"] == "Sweet Co"
    assert detail["turns"][-1]["kind"] == "generated_result"
    assert detail["turns"][-1]["html"] == PAGE
    assert len(stub.calls) == 1

    listing = client.get("/api/conversations").json()
    assert listing["selected_id"] == created["id"]
    assert listing["conversations"][0]["title"] == "Sweet Co"

    preview = client.get(f"/api/conversations/{created['id']}/preview")
    assert preview.status_code == 200
    assert preview.headers["content-security-policy"] == "sandbox allow-scripts"
    assert preview.text == render_document(PAGE, "Sweet Co")

    download = client.get(f"/api/conversations/{created['id']}/download")
    assert download.status_code == 200
    assert download.headers["content-type"].startswith("text/html")
    assert 'filename="index.html"' in download.headers["content-disposition"]
    assert download.text == render_document(PAGE, "Sweet Co")


def test_blank_answer_is_422(make_client) -> None:
    client = make_client(SiteBuilderAgent(ConversationStore(), client=StubClient()))
    created = client.post("/api/conversations").json()

    response = client.post(f"/api/conversations/{created['id']}/answers", json={"answer": "  "})
    assert response.status_code == 422
    assert client.get(f"/api/conversations/{created['id']}").json()["turns"] == created["turns"]


def test_unknown_conversation_is_404(make_client) -> None:
    client = make_client(SiteBuilderAgent(ConversationStore(), client=StubClient()))
    assert client.get("/api/conversations/nope").status_code == 404
    assert client.post("/api/conversations/nope/answers", json={"answer": "x"}).status_code == 404
    assert client.post("/api/conversations/nope/select").status_code == 404


def test_preview_before_generation_is_404(make_client) -> None:
    client = make_client(SiteBuilderAgent(ConversationStore(), client=StubClient()))
    created = client.post("/api/conversations").json()
    assert client.get(f"/api/conversations/{created['id']}/preview").status_code == 404
    assert client.get(f"/api/conversations/{created['id']}/download").status_code == 404


def test_failure_then_retry_over_http(make_client) -> None:
    stub = StubClient(
        RemoteCallFailure("Service unavailable", code="server_error", status_code=503),
        RemoteCallFailure("Service unavailable", code="server_error", status_code=503),
        RemoteCallFailure("Service unavailable", code="server_error", status_code=503),
        RemoteCallFailure("Service unavailable", code="server_error", status_code=503),
    )
    client = make_client(SiteBuilderAgent(ConversationStore(), client=stub, max_retries=3))
    created = client.post("/api/conversations").json()

    detail = _answer_all(client, created["id"])
    assert detail["turns"][-1]["kind"] == "error_notice"
    assert "Service unavailable" in detail["turns"][-1]["content"]
    assert detail["status"]["can_retry"] is True
    assert detail["status"]["retries_remaining"] == 3

    for _ in range(3):
        response = client.post(f"/api/conversations/{created['id']}/retry")
        assert response.status_code == 200

    assert response.json()["status"]["can_retry"] is False
    assert client.post(f"/api/conversations/{created['id']}/retry").status_code == 409
    assert len(stub.calls) == 4


def test_select_switches_conversation(make_client) -> None:
    client = make_client(SiteBuilderAgent(ConversationStore(), client=StubClient()))
    first = client.post("/api/conversations").json()
    second = client.post("/api/conversations").json()

    assert client.get("/api/conversations").json()["selected_id"] == second["id"]
    selected = client.post(f"/api/conversations/{first['id']}/select").json()
    assert selected["selected"] is True
    assert client.get("/api/conversations").json()["selected_id"] == first["id"]
