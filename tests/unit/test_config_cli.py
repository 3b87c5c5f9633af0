from aerocms.api.main import app
from aerocms.api.middleware.redirects import should_skip
from aerocms.cli import build_parser
from aerocms.core.config import Settings


def test_settings_split_comma_separated_extensions():
    config = Settings(ALLOWED_MEDIA_EXTENSIONS=["PNG", ".Jpg"])

    assert config.ALLOWED_MEDIA_EXTENSIONS == [".png", ".jpg"]


def test_settings_split_origins_string():
    config = Settings(ALLOWED_ORIGINS="https://a.test, https://b.test,")

    assert config.ALLOWED_ORIGINS == ["https://a.test", "https://b.test"]


def test_redirect_middleware_skips_api_admin_and_files():
    assert should_skip("/api/content")
    assert should_skip("/Admin/pages")
    assert should_skip("/account/login")
    assert should_skip("/media/logo.png")
    assert not should_skip("/old-page")


def test_cli_parses_create_user_roles():
    args = build_parser().parse_args(
        ["create-user", "ed@aerocms.io", "secret-pass", "--role", "Creator", "--role", "Publisher"]
    )

    assert args.command == "create-user"
    assert args.roles == ["Creator", "Publisher"]
    assert args.name == ""


def test_cli_serve_defaults():
    args = build_parser().parse_args(["serve"])

    assert args.port == 8080
    assert args.reload is False


def test_site_resolution_runs_before_redirects():
    # Starlette keeps user_middleware outermost first.
    names = [middleware.cls.__name__ for middleware in app.user_middleware]

    assert names == [
        "RateLimitMiddleware",
        "LoggingMiddleware",
        "SiteResolutionMiddleware",
        "RedirectMiddleware",
        "CORSMiddleware",
    ]
