"""Send saved Pocket articles to a Kindle.

Usage:
    from pocket_kindle.app import build_app

    app = build_app()
    if not app.session.is_logged_in():
        start = await app.session.start_login()
        # User visits start.auth_url and approves
        await app.session.await_login()

    articles = await app.pocket.list()
"""

__version__ = "0.1.0"
