"""
Prompts for the website builder
"""

from urllib.parse import quote

from webcraft.builder.models import AnswerSet
from webcraft.errors import ValidationError

SYSTEM_PROMPT = (
    "You are an expert web developer and AI assistant. Always provide complete, "
    "production-ready solutions. When asked to improve or fix code, carefully analyze "
    "the previous context and provide precise, implementable suggestions."
)

IMAGE_SEARCH_URL = "https://source.unsplash.com/1600x900/?{query}"

PLACEHOLDER_IMAGE_URL = "https://via.placeholder.com/1600x900?text=Website+Image"

SITE_PROMPT_TEMPLATE = """Generate a complete, production-ready HTML landing page for a website with the following details:
1. Type of site: {site_type}
2. Site name: {site_name}
3. Preferred colors: {site_colors}
4. Description: {description}

STRICT REQUIREMENTS:
- Create a hero section with a prominent image
- Use this specific image URL: {image_url}
- If the image doesn't load, use a placeholder image
- Include an <img> tag with explicit width and height
- Alt text must describe the site type
- Use ONLY CSS for styling
- Fully responsive design
- Semantic HTML5 structure
- Engaging, concise content
- Professional color palette
- Clean typography
- NO external JavaScript
- Include appropriate meta tags

IMPORTANT INSTRUCTIONS FOR IMAGE:
- Add this HTML for the hero image:
`<div class="hero-section relative w-full h-[500px] overflow-hidden">
    <img
        src="{image_url}"
        alt="Image representing {site_type}"
        onerror="this.onerror=null; this.src='{placeholder_url}'"
        class="w-full h-full object-cover absolute top-0 left-0"
        width="1600"
        height="900"
    />
    <div class="absolute inset-0 bg-black bg-opacity-50 flex items-center justify-center">
        <h1 class="text-white text-4xl font-bold">{site_name}</h1>
    </div>
</div>`

IMPORTANT: Wrap all content inside a <div class="container mx-auto px-4"> for proper responsive layout."""


def image_search_url(site_type: str) -> str:
    # Same escaping as encodeURIComponent
    return IMAGE_SEARCH_URL.format(query=quote(site_type, safe="!*'()"))


def build_prompt(answers: AnswerSet) -> str:
    """
    Render a complete answer set into the site generation prompt

    Pure: the same answers always give the same text.
    """
    if not answers.is_complete:
        raise ValidationError("All four questions must be answered before generating")

    return SITE_PROMPT_TEMPLATE.format(
        site_type=answers.site_type,
        site_name=answers.site_name,
        site_colors=answers.site_colors,
        description=answers.description,
        image_url=image_search_url(answers.site_type),
        placeholder_url=PLACEHOLDER_IMAGE_URL,
    )
