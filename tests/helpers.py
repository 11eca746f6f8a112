"""Shared builders for the test suite."""

import httpx


def make_client(routes: dict) -> httpx.AsyncClient:
    """
    httpx client over a MockTransport.

    `routes` maps "scheme://host/path" to a callable(request) -> Response,
    an exception instance to raise, or a (status, body[, headers]) tuple.
    Anything unrouted answers 404.
    """
    def handler(request: httpx.Request) -> httpx.Response:
        key = f"{request.url.scheme}://{request.url.host}{request.url.path}"
        route = routes.get(key)
        if route is None:
            return httpx.Response(404, text="not found")
        if isinstance(route, Exception):
            raise route
        if callable(route):
            return route(request)
        status, body, *rest = route
        headers = rest[0] if rest else None
        if isinstance(body, (dict, list)):
            return httpx.Response(status, json=body, headers=headers)
        return httpx.Response(status, content=body, headers=headers)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def words(n: int, word: str = "content") -> str:
    return " ".join([word] * n)


def make_page(
    title: str = "A descriptive page title for the audit tests!!",
    description: str | None = None,
    body: str = "",
    head: str = "",
    lang: str | None = "en",
) -> str:
    lang_attr = f' lang="{lang}"' if lang is not None else ""
    desc = f'<meta name="description" content="{description}">' if description is not None else ""
    return (
        f"<!DOCTYPE html><html{lang_attr}><head><title>{title}</title>{desc}{head}</head>"
        f"<body>{body}</body></html>"
    )


ARTICLE_PARAGRAPH = (
    "Search engines reward pages that answer a question clearly, with evidence, "
    "examples, and a structure that readers can follow from start to finish. "
)

ARTICLE_BODY = "".join(f"<p>{ARTICLE_PARAGRAPH * 3}</p>" for _ in range(8))

FULL_PAGE = make_page(
    title="Complete guide to auditing a small business website",
    description="x" * 140,
    head=(
        '<meta name="keywords" content="seo, audit">'
        '<link rel="canonical" href="https://example.com/">'
        '<link rel="icon" href="/favicon.ico">'
        '<link rel="stylesheet" href="/main.css">'
        '<meta property="og:title" content="Guide">'
        '<meta property="og:description" content="Everything about audits">'
        '<meta property="og:image" content="https://example.com/og.png">'
        '<meta name="twitter:card" content="summary_large_image">'
        '<script type="application/ld+json">{"@context": "https://schema.org", "@type": "Organization", "name": "Ex"}</script>'
        '<script src="/app.js" defer></script>'
    ),
    body=(
        '<nav><a href="/">Home</a><a href="/about">About</a><a href="/blog">Blog</a></nav>'
        '<div class="article-content"><h1>Auditing a website</h1>'
        + ARTICLE_BODY
        + '<h2>Sources</h2><p>See <a href="https://developers.google.com/search">the search docs</a>.</p>'
        '<img src="/chart.png" alt="Traffic chart"></div>'
        "<footer>Copyright Example Inc.</footer>"
    ),
)

