"""
Builder page served at /
"""

BUILDER_PAGE = """
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1.0" />
    <title>Webcraft · Website Builder</title>
    <style>
        body { font-family:'Inter',system-ui,sans-serif; margin:0; display:flex; height:100vh; background:#f9fafb; color:#111827; }
        aside { width:260px; background:#111827; color:#d1d5db; padding:16px; display:flex; flex-direction:column; }
        aside button.new { padding:10px 14px; border:none; border-radius:10px; background:#2563eb; color:#fff; cursor:pointer; font-weight:600; }
        aside ul { list-style:none; padding:0; margin:18px 0 0; overflow-y:auto; flex:1; }
        aside li { padding:8px 12px; border-radius:8px; cursor:pointer; white-space:nowrap; overflow:hidden; text-overflow:ellipsis; }
        aside li.active, aside li:hover { background:#374151; color:#fff; }
        .config-warning { background:#7f1d1d; color:#fecaca; padding:10px; border-radius:8px; font-size:0.85rem; margin-top:12px; }
        main { flex:1; display:flex; min-width:0; }
        .chat { width:42%; display:flex; flex-direction:column; border-right:1px solid #e5e7eb; background:#fff; }
        .log { flex:1; overflow-y:auto; padding:20px; }
        .turn { padding:12px 16px; border-radius:12px; margin-bottom:10px; white-space:pre-wrap; }
        .turn.user { background:#eff6ff; margin-left:40px; }
        .turn.assistant { background:#f3f4f6; margin-right:40px; }
        .turn.error_notice { background:#fef2f2; color:#b91c1c; }
        form { display:flex; gap:8px; padding:16px; border-top:1px solid #e5e7eb; }
        form input { flex:1; padding:12px; border-radius:10px; border:1px solid #d1d5db; }
        form button, .actions button, .actions a { padding:10px 16px; border:none; border-radius:10px; background:#2563eb; color:#fff; cursor:pointer; text-decoration:none; font-size:0.9rem; }
        form button:disabled { background:#9ca3af; cursor:not-allowed; }
        .inline-error { color:#b91c1c; padding:0 16px 12px; min-height:1em; }
        .preview { flex:1; display:flex; flex-direction:column; min-width:0; }
        .actions { display:flex; gap:8px; padding:12px; border-bottom:1px solid #e5e7eb; }
        iframe { flex:1; border:none; background:#fff; }
        pre.code { display:none; margin:0; padding:16px; background:#111827; color:#e5e7eb; overflow:auto; max-height:40vh; }
        .placeholder { flex:1; display:flex; align-items:center; justify-content:center; color:#6b7280; }
    </style>
</head>
<body>
    <aside>
        <button class="new" id="new-chat">+ New Chat</button>
        <div id="config-warning"></div>
        <ul id="conversations"></ul>
    </aside>
    <main>
        <section class="chat">
            <div class="log" id="log"></div>
            <div class="inline-error" id="inline-error"></div>
            <form id="answer-form">
                <input id="answer" autocomplete="off" placeholder="Type your answer..." />
                <button type="submit" id="send">Send</button>
            </form>
        </section>
        <section class="preview">
            <div class="actions" id="actions" hidden>
                <button id="retry" hidden>Retry</button>
                <button id="toggle-code">View Code</button>
                <a id="open-tab" target="_blank" rel="noopener">Open in New Tab</a>
                <a id="download">Download HTML</a>
            </div>
            <pre class="code" id="code"></pre>
            <div class="placeholder" id="placeholder">Your generated website will appear here</div>
            <!-- Generated markup runs in an opaque origin with no access to this page -->
            <iframe id="frame" sandbox="allow-scripts" title="Website Preview" hidden></iframe>
        </section>
    </main>
    <script>
        const state = { current: null };
        const $ = (id) => document.getElementById(id);

        async function api(path, options) {
            const response = await fetch(path, Object.assign({ headers: { 'Content-Type': 'application/json' } }, options || {}));
            const body = await response.json().catch(() => ({}));
            if (!response.ok) {
                throw new Error(typeof body.detail === 'string' ? body.detail : response.statusText);
            }
            return body;
        }

        function renderSidebar(list) {
            const ul = $('conversations');
            ul.replaceChildren();
            list.conversations.forEach((conv) => {
                const li = document.createElement('li');
                li.textContent = conv.title;
                if (state.current && conv.id === state.current.id) li.className = 'active';
                li.onclick = () => selectConversation(conv.id);
                ul.appendChild(li);
            });
        }

        function renderConversation(detail) {
            state.current = detail;
            const log = $('log');
            log.replaceChildren();
            detail.turns.forEach((turn) => {
                const div = document.createElement('div');
                div.className = 'turn ' + turn.role + ' ' + turn.kind;
                div.textContent = turn.content;
                log.appendChild(div);
            });
            log.scrollTop = log.scrollHeight;

            const status = detail.status;
            $('answer').disabled = status.generating || status.ready;
            $('send').disabled = status.generating || status.ready;
            $('send').textContent = status.step === 3 ? 'Generate Website' : 'Send';
            $('retry').hidden = !status.can_retry;
            $('retry').textContent = 'Retry (' + status.retries_remaining + ' left)';

            const result = [...detail.turns].reverse().find((t) => t.kind === 'generated_result' && t.html);
            const base = '/api/conversations/' + detail.id;
            $('actions').hidden = !result && !status.can_retry;
            $('open-tab').hidden = $('download').hidden = $('toggle-code').hidden = !result;
            if (result) {
                $('frame').src = base + '/preview';
                $('frame').hidden = false;
                $('placeholder').hidden = true;
                $('open-tab').href = base + '/preview';
                $('download').href = base + '/download';
                $('code').textContent = result.html;
            } else {
                $('frame').hidden = true;
                $('frame').removeAttribute('src');
                $('placeholder').hidden = false;
                $('code').textContent = '';
            }
        }

        async function refresh() {
            renderSidebar(await api('/api/conversations'));
        }

        async function selectConversation(id) {
            renderConversation(await api('/api/conversations/' + id + '/select', { method: 'POST' }));
            await refresh();
        }

        async function newConversation() {
            renderConversation(await api('/api/conversations', { method: 'POST' }));
            await refresh();
        }

        async function run(action) {
            $('inline-error').textContent = '';
            try {
                await action();
            } catch (err) {
                $('inline-error').textContent = err.message;
            }
        }

        $('new-chat').onclick = () => run(newConversation);
        $('toggle-code').onclick = () => {
            const code = $('code');
            code.style.display = code.style.display === 'block' ? 'none' : 'block';
            $('toggle-code').textContent = code.style.display === 'block' ? 'Hide Code' : 'View Code';
        };
        $('retry').onclick = () => run(async () => {
            $('retry').hidden = true;
            renderConversation(await api('/api/conversations/' + state.current.id + '/retry', { method: 'POST' }));
        });
        $('answer-form').onsubmit = (event) => {
            event.preventDefault();
            run(async () => {
                if (!state.current) await newConversation();
                const answer = $('answer').value;
                if (!answer.trim()) return;
                $('answer').disabled = $('send').disabled = true;
                try {
                    renderConversation(await api('/api/conversations/' + state.current.id + '/answers', {
                        method: 'POST', body: JSON.stringify({ answer: answer })
                    }));
                    $('answer').value = '';
                } finally {
                    if (state.current) renderConversation(state.current);
                }
                await refresh();
            });
        };

        run(async () => {
            const health = await api('/api/health');
            if (!health.configured) {
                const warning = document.createElement('div');
                warning.className = 'config-warning';
                warning.textContent = health.message || 'The completion service is not configured';
                $('config-warning').appendChild(warning);
            }
            const list = await api('/api/conversations');
            if (list.selected_id) {
                renderConversation(await api('/api/conversations/' + list.selected_id));
            } else {
                await newConversation();
            }
            renderSidebar(await api('/api/conversations'));
        });
    </script>
</body>
</html>
"""
