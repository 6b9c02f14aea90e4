"""
Username legality checks.

Usernames are exposed as the first path segment of public URLs
(``example.com/<username>``), so anything that collides with a site route,
a well-known file, or a generally reserved word must be refused.
``UsernamePolicy`` folds the whole forbidden-pattern table into one anchored,
case-insensitive regular expression, compiled once.

Manifesto:
    - **Compile once:** The alternation has several hundred branches;
      building it per call is wasteful, so the shared policy is cached.
    - **Whole-string match:** A fragment only forbids a username it matches
      entirely (``admin`` forbids ``admin``, not ``badminton``).
    - **Boolean answers:** ``is_forbidden`` never raises for a string.

Architecture:
    ::

        FORBIDDEN_USERNAME_PATTERNS (static tuple)
                 │  + anonymous sentinel (escaped, first)
                 ▼
        re.compile("(?:anonymous|page-not-found|docs|...)", IGNORECASE)
                 │
                 ▼
        UsernamePolicy.is_forbidden(candidate) → pattern.fullmatch(candidate)

Examples:
    >>> policy = UsernamePolicy()
    >>> policy.is_forbidden("ADMIN")
    True
    >>> policy.is_forbidden("my-cool-scraper")
    False
    >>> is_forbidden_username(".hidden")
    True

Guardrails:
    ❌ DON'T: Treat ``is_forbidden(name) is False`` as "valid username"
    ✅ DO: Use ``validate_username`` which also checks length and charset

Tags:
    usernames, validation, regex, reserved-words, keel-core

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import functools
import re
from collections.abc import Iterable

from keel.core.errors import ValidationError

ANONYMOUS_USERNAME = "anonymous"

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30

# The bounds here must match USERNAME_MIN_LENGTH / USERNAME_MAX_LENGTH.
USERNAME_REGEX = re.compile(r"^[a-zA-Z0-9_.\-]{3,30}$")
_USERNAME_CHARSET = re.compile(r"[a-zA-Z0-9_.\-]*")

FORBIDDEN_USERNAME_PATTERNS: tuple[str, ...] = (
    # Site routes
    "page-not-found", "docs", "terms-of-use", "about", "pricing", "privacy-policy", "customers",
    "request-form", "request-solution", "release-notes", "jobs", "api-reference", "video-tutorials",
    "acts", "key-value-stores", "schedules", "account", "sign-up", "sign-in-discourse", "admin",
    "documentation", "change-password", "enroll-account", "forgot-password", "reset-password",
    "sign-in", "verify-email", "live-status", "browser-info", "webhooks", "health-check", "api",
    "change-log", "dashboard", "community", "crawlers", "ext",

    # Various strings
    "admin", "administration", "crawler", "act", "library", "lib", "apifier", "team",
    "contact", "doc", "documentation", "for-business", "for-developers", "developers", "business",
    "integrations", "job", "setting", "settings", "privacy", "policy", "assets", "help",
    "config", "configuration", "terms", "hiring", "hire", "status", "status-page", "solutions",
    "support", "market", "marketplace", "download", "downloads", "username", "users", "user",
    "login", "logout", "signin", "sign", "signup", "sign-out", "signout", "plugins", "plug-ins",
    "reset", "password", "passwords", "square", "profile-photos", "profiles", "true", "false",
    "js", "css", "img", "images", "image", "partials", "fonts", "font", "dynamic_templates",
    "app", "schedules", "community", "storage", "storages", "account", "node_modules", "bower_components",
    "video", "knowledgebase", "forum", "customers", "blog", "health-check", "health", "anim",
    "forum_topics.json", "forum_categories.json", "me", "you", "him", "she", "it", "external",
    "actor", "crawler", "scheduler", "api", "sdk", "puppeteer", "webdriver",
    "selenium", "(selenium.*webdriver)", "undefined", "page-analyzer", "wp-login.php",
    "welcome.action", "echo", "proxy", "super-proxy", "gdpr", "case-studies", "use-cases", "how-to",
    "kb", "cookies", "cookie-policy", "cookies-policy", "powered-by", "run", "runs", "actor", "actors",
    "act", "acts", "success-stories", "roadmap", "join-marketplace", "presskit", "press-kit", "covid-19",
    "covid", "covid19", "matfyz", "ideas", "public-actors", "resources", "partners", "affiliate",
    "industries", "web-scraping", "custom-solutions", "solution-provider",

    # Special files
    "index", r"index\.html", r"(favicon\.[a-z]+)", "BingSiteAuth.xml", r"(google.+\.html)", r"robots\.txt",
    r"(sitemap\.[a-z]+)", "(apple-touch-icon.*)", r"security-whitepaper\.pdf",

    # All hidden files
    r"(\..*)",

    # Files starting with xxx-
    "(xxx-.*)",

    # Strings not starting with letter or number
    "([^0-9a-z].*)",

    # Strings not ending with letter or number
    "(.*[^0-9a-z])",

    # Strings with two or more underscores, dots or dashes in a row
    r"(.*[_.\-]{2}.*)",

    # Reserved usernames from https://github.com/shouldbee/reserved-usernames
    "0", "about", "access", "account", "accounts", "activate", "activities", "activity", "ad", "add",
    "address", "adm", "admin", "administration", "administrator", "ads", "adult", "advertising",
    "affiliate", "affiliates", "ajax", "all", "alpha", "analysis", "analytics", "android", "anon",
    "anonymous", "api", "app", "apps", "archive", "archives", "article", "asct", "asset", "atom",
    "auth", "authentication", "avatar", "backup", "balancer-manager", "banner", "banners", "beta",
    "billing", "bin", "blog", "blogs", "board", "book", "bookmark", "bot", "bots", "bug", "business",
    "cache", "cadastro", "calendar", "call", "campaign", "cancel", "captcha", "career", "careers",
    "cart", "categories", "category", "cgi", "cgi-bin", "changelog", "chat", "check", "checking",
    "checkout", "client", "cliente", "clients", "code", "codereview", "comercial", "comment",
    "comments", "communities", "community", "company", "compare", "compras", "config", "configuration",
    "connect", "contact", "contact-us", "contact_us", "contactus", "contest", "contribute", "corp",
    "create", "css", "dashboard", "data", "db", "default", "delete", "demo", "design", "designer",
    "destroy", "dev", "devel", "developer", "developers", "diagram", "diary", "dict", "dictionary",
    "die", "dir", "direct_messages", "directory", "dist", "doc", "docs", "documentation", "domain",
    "download", "downloads", "ecommerce", "edit", "editor", "edu", "education", "email", "employment",
    "empty", "end", "enterprise", "entries", "entry", "error", "errors", "eval", "event", "exit",
    "explore", "facebook", "faq", "favorite", "favorites", "feature", "features", "feed", "feedback",
    "feeds", "file", "files", "first", "flash", "fleet", "fleets", "flog", "follow", "followers",
    "following", "forgot", "form", "forum", "forums", "founder", "free", "friend", "friends", "ftp",
    "gadget", "gadgets", "game", "games", "get", "gift", "gifts", "gist", "github", "graph", "group",
    "groups", "guest", "guests", "help", "home", "homepage", "host", "hosting", "hostmaster",
    "hostname", "howto", "hpg", "html", "http", "httpd", "https", "i", "iamges", "icon", "icons",
    "id", "idea", "ideas", "image", "images", "imap", "img", "index", "indice", "info", "information",
    "inquiry", "instagram", "intranet", "invitations", "invite", "ipad", "iphone", "irc", "is",
    "issue", "issues", "it", "item", "items", "java", "javascript", "job", "jobs", "join", "js",
    "json", "jump", "knowledgebase", "language", "languages", "last", "ldap-status", "legal", "license",
    "link", "links", "linux", "list", "lists", "log", "log-in", "log-out", "log_in", "log_out",
    "login", "logout", "logs", "m", "mac", "mail", "mail1", "mail2", "mail3", "mail4", "mail5",
    "mailer", "mailing", "maintenance", "manager", "manual", "map", "maps", "marketing", "master",
    "me", "media", "member", "members", "message", "messages", "messenger", "microblog", "microblogs",
    "mine", "mis", "mob", "mobile", "movie", "movies", "mp3", "msg", "msn", "music", "musicas", "mx",
    "my", "mysql", "name", "named", "nan", "navi", "navigation", "net", "network", "new", "news",
    "newsletter", "nick", "nickname", "notes", "noticias", "notification", "notifications", "notify",
    "ns", "ns1", "ns10", "ns2", "ns3", "ns4", "ns5", "ns6", "ns7", "ns8", "ns9", "null", "oauth",
    "oauth_clients", "offer", "offers", "official", "old", "online", "openid", "operator", "order",
    "orders", "organization", "organizations", "overview", "owner", "owners", "page", "pager",
    "pages", "panel", "password", "payment", "perl", "phone", "photo", "photoalbum", "photos", "php",
    "phpmyadmin", "phppgadmin", "phpredisadmin", "pic", "pics", "ping", "plan", "plans", "plugin",
    "plugins", "policy", "pop", "pop3", "popular", "portal", "post", "postfix", "postmaster", "posts",
    "pr", "premium", "press", "price", "pricing", "privacy", "privacy-policy", "privacy_policy",
    "privacypolicy", "private", "product", "products", "profile", "project", "projects", "promo",
    "pub", "public", "purpose", "put", "python", "query", "random", "ranking", "read", "readme",
    "recent", "recruit", "recruitment", "register", "registration", "release", "remove", "replies",
    "report", "reports", "repositories", "repository", "req", "request", "requests", "reset", "roc",
    "root", "rss", "ruby", "rule", "sag", "sale", "sales", "sample", "samples", "save", "school",
    "script", "scripts", "search", "secure", "security", "self", "send", "server", "server-info",
    "server-status", "service", "services", "session", "sessions", "setting", "settings", "setup",
    "share", "shop", "show", "sign-in", "sign-up", "sign_in", "sign_up", "signin", "signout", "signup",
    "site", "sitemap", "sites", "smartphone", "smtp", "soporte", "source", "spec", "special", "sql",
    "src", "ssh", "ssl", "ssladmin", "ssladministrator", "sslwebmaster", "staff", "stage", "staging",
    "start", "stat", "state", "static", "stats", "status", "store", "stores", "stories", "style",
    "styleguide", "stylesheet", "stylesheets", "subdomain", "subscribe", "subscriptions", "suporte",
    "support", "svn", "swf", "sys", "sysadmin", "sysadministrator", "system", "tablet", "tablets",
    "tag", "talk", "task", "tasks", "team", "teams", "tech", "telnet", "term", "terms",
    "terms-of-service", "terms_of_service", "termsofservice", "test", "test1", "test2", "test3",
    "teste", "testing", "tests", "theme", "themes", "thread", "threads", "tmp", "todo", "tool",
    "tools", "top", "topic", "topics", "tos", "tour", "translations", "trends", "tutorial", "tux",
    "tv", "twitter", "undef", "unfollow", "unsubscribe", "update", "upload", "uploads", "url",
    "usage", "user", "username", "users", "usuario", "vendas", "ver", "version", "video", "videos",
    "visitor", "watch", "weather", "web", "webhook", "webhooks", "webmail", "webmaster", "website",
    "websites", "welcome", "widget", "widgets", "wiki", "win", "windows", "word", "work", "works",
    "workshop", "ww", "wws", "www", "www1", "www2", "www3", "www4", "www5", "www6", "www7", "wwws",
    "wwww", "xfn", "xml", "xmpp", "xpg", "xxx", "yaml", "year", "yml", "you", "yourdomain", "yourname",
    "yoursite", "yourusername",
)


class UsernamePolicy:
    """
    Compiled forbidden-username matcher.

    The alternation is built in the constructor and never rebuilt; instances
    are safe to share. The anonymous sentinel is matched literally and is
    always part of the set, whatever ``patterns`` holds.

    Args:
        anonymous_username: Sentinel used for anonymous users
        patterns: Literal strings and regex fragments to forbid
    """

    def __init__(
        self,
        anonymous_username: str = ANONYMOUS_USERNAME,
        patterns: Iterable[str] = FORBIDDEN_USERNAME_PATTERNS,
    ) -> None:
        self._anonymous_username = anonymous_username
        self._patterns = tuple(patterns)
        alternation = "|".join((re.escape(anonymous_username), *self._patterns))
        self._regex = re.compile(f"(?:{alternation})", re.IGNORECASE)

    @property
    def anonymous_username(self) -> str:
        return self._anonymous_username

    @property
    def patterns(self) -> tuple[str, ...]:
        return self._patterns

    @property
    def pattern(self) -> re.Pattern[str]:
        """The compiled, case-insensitive alternation."""
        return self._regex

    def is_forbidden(self, candidate: str) -> bool:
        """Return True if the whole of ``candidate`` matches a forbidden pattern."""
        return self._regex.fullmatch(candidate) is not None

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(anonymous_username={self._anonymous_username!r}, "
            f"patterns={len(self._patterns)})"
        )


@functools.cache
def get_username_policy() -> UsernamePolicy:
    """Return the process-wide policy, built on first use from settings."""
    from keel.core.settings import get_settings

    return UsernamePolicy(anonymous_username=get_settings().anonymous_username)


def is_forbidden_username(username: str) -> bool:
    """
    Check whether ``username`` is listed in the forbidden table or matches
    one of the structural rules.
    """
    return get_username_policy().is_forbidden(username)


def validate_username(
    username: str,
    *,
    policy: UsernamePolicy | None = None,
    min_length: int | None = None,
    max_length: int | None = None,
) -> str:
    """
    Validate a username for registration and return it unchanged.

    Checks run cheapest first: length, allowed characters, then the
    forbidden-pattern policy.

    The length bounds default to the configured
    ``username_min_length`` / ``username_max_length``.

    Raises:
        ValidationError: with ``constraint`` set to ``"length"``,
            ``"charset"`` or ``"forbidden"``
    """
    if min_length is None or max_length is None:
        from keel.core.settings import get_settings

        settings = get_settings()
        min_length = settings.username_min_length if min_length is None else min_length
        max_length = settings.username_max_length if max_length is None else max_length

    if not min_length <= len(username) <= max_length:
        raise ValidationError(
            f"Username must be between {min_length} and {max_length} characters long",
            field="username",
            value=username,
            constraint="length",
        )
    if not _USERNAME_CHARSET.fullmatch(username):
        raise ValidationError(
            "Username may only contain letters, digits, '_', '.' and '-'",
            field="username",
            value=username,
            constraint="charset",
        )
    policy = policy or get_username_policy()
    if policy.is_forbidden(username):
        raise ValidationError(
            f"Username {username!r} is not allowed",
            field="username",
            value=username,
            constraint="forbidden",
        )
    return username


def is_valid_username(username: str, *, policy: UsernamePolicy | None = None) -> bool:
    """Boolean form of :func:`validate_username` with the configured bounds."""
    try:
        validate_username(username, policy=policy)
    except ValidationError:
        return False
    return True


__all__ = [
    "ANONYMOUS_USERNAME",
    "USERNAME_MIN_LENGTH",
    "USERNAME_MAX_LENGTH",
    "USERNAME_REGEX",
    "FORBIDDEN_USERNAME_PATTERNS",
    "UsernamePolicy",
    "get_username_policy",
    "is_forbidden_username",
    "validate_username",
    "is_valid_username",
]
