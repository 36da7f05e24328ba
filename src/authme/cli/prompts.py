"""
Interactive questions for ``authme add``.
"""

from typing import List, Optional

from rich.prompt import Confirm, Prompt

from authme.config_builder import ROLE_NAME, get_default_answers
from authme.schemas import PromptAnswers
from .output import get_console

console = get_console()

ACCESS_EXPIRATIONS = ["15m", "30m", "1h", "4h", "1d"]
REFRESH_EXPIRATIONS = ["7d", "30d", "90d", "1y"]
DATABASES = ["postgres", "mysql", "sqlite", "mongodb"]


def _ask_roles(default: List[str]) -> List[str]:
    while True:
        raw = Prompt.ask("Roles (comma separated)", default=", ".join(default))
        roles = list(dict.fromkeys(r.strip() for r in raw.split(",") if r.strip()))
        invalid = [r for r in roles if not ROLE_NAME.match(r)]
        if not roles:
            console.print("[red]Please enter at least one role[/red]")
        elif invalid:
            console.print(f"[red]Role names must be identifiers: {', '.join(invalid)}[/red]")
        else:
            return roles


def prompt_answers(detected_orm: str = "none", detected_db: Optional[str] = None) -> PromptAnswers:
    """
    Ask all configuration questions.

    Args:
        detected_orm: ORM found in the project ("none" skips the confirmation)
        detected_db: Database found in the project

    Returns:
        The collected answers
    """
    defaults = get_default_answers(detected_orm, detected_db)

    enable_rbac = Confirm.ask("Enable Role-Based Access Control (RBAC)?", default=defaults.enable_rbac)
    roles = _ask_roles(defaults.roles) if enable_rbac else []

    refresh_tokens = Confirm.ask("Enable refresh token rotation?", default=defaults.refresh_tokens)
    access_expiration = Prompt.ask(
        "JWT access token expiration",
        choices=ACCESS_EXPIRATIONS,
        default=defaults.access_expiration,
    )
    refresh_expiration = defaults.refresh_expiration
    if refresh_tokens:
        refresh_expiration = Prompt.ask(
            "JWT refresh token expiration",
            choices=REFRESH_EXPIRATIONS,
            default=defaults.refresh_expiration,
        )

    enable_rate_limiting = Confirm.ask(
        "Enable rate limiting on auth endpoints? (recommended)", default=defaults.enable_rate_limiting
    )
    enable_swagger = Confirm.ask(
        "Enable Swagger API documentation? (recommended)", default=defaults.enable_swagger
    )
    generate_tests = Confirm.ask("Generate unit tests? (recommended)", default=defaults.generate_tests)
    use_username = Confirm.ask("Add username field to user?", default=defaults.use_username)
    reset_password = Confirm.ask("Add forgot/reset password flow?", default=defaults.reset_password)
    email_verification = Confirm.ask(
        "Track email verification on users?", default=defaults.email_verification
    )

    use_detected_orm = True
    if detected_orm != "none":
        db_label = f" with {detected_db.capitalize()}" if detected_db else ""
        use_detected_orm = Confirm.ask(f"Detected {detected_orm.upper()}{db_label}. Use it?", default=True)

    database = detected_db
    if detected_orm == "none" or not use_detected_orm:
        database = Prompt.ask("Select database", choices=DATABASES, default=defaults.database)

    auto_install = Confirm.ask("Auto-install dependencies after generation?", default=defaults.auto_install)

    return PromptAnswers(
        enable_rbac=enable_rbac,
        roles=roles,
        refresh_tokens=refresh_tokens,
        access_expiration=access_expiration,
        refresh_expiration=refresh_expiration,
        enable_rate_limiting=enable_rate_limiting,
        enable_swagger=enable_swagger,
        generate_tests=generate_tests,
        use_username=use_username,
        email_verification=email_verification,
        reset_password=reset_password,
        use_detected_orm=use_detected_orm,
        database=database,
        auto_install=auto_install,
    )
