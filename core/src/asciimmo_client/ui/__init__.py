"""Server-rendered browser UI for the world generator.

- served by the FastAPI app in ``asciimmo_client.app``
- plain HTML forms + redirects, no client-side script

Session: the token and username live in HttpOnly cookies (see CookieStore).
"""
