"""
Build the immutable GenerationConfig from collected answers.
"""

import base64
import os
import re
from datetime import datetime, timezone
from typing import List, Optional

from authme import __version__
from authme.exceptions import ConfigError
from authme.schemas import (
    FeaturesConfig,
    GenerationConfig,
    JWTConfig,
    PromptAnswers,
    RBACConfig,
)


# Roles become TypeScript enum members
ROLE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def generate_secret(length: int = 32) -> str:
    """Cryptographically secure random secret, base64 encoded."""
    return base64.b64encode(os.urandom(length)).decode("ascii")


def get_default_answers(detected_orm: str = "none", detected_db: Optional[str] = None) -> PromptAnswers:
    """Answers used by ``--yes``."""
    return PromptAnswers(database=detected_db or "postgres")


def validate_roles(roles: List[str]) -> List[str]:
    """
    Check role names for the generated ``Role`` enum.

    Raises:
        ConfigError: If there are no roles, a duplicate or a non-identifier name
    """
    if not roles:
        raise ConfigError("RBAC needs at least one role")
    invalid = [role for role in roles if not ROLE_NAME.match(role)]
    if invalid:
        raise ConfigError(f"Invalid role name(s): {', '.join(invalid)}")
    if len(set(roles)) != len(roles):
        raise ConfigError("Duplicate role names")
    return list(roles)


def build_config(
    answers: PromptAnswers,
    project_name: str,
    source_root: str,
    detected_orm: str = "none",
    detected_db: Optional[str] = None,
    secret: Optional[str] = None,
) -> GenerationConfig:
    """
    Pure function from answers and project facts to a GenerationConfig.

    Args:
        answers: Collected answers
        project_name: Name shown in generated files
        source_root: Project source root, e.g. ``src``
        detected_orm: ORM found by the prober
        detected_db: Database found by the prober
        secret: JWT secret (a random one if omitted)
    """
    return GenerationConfig(
        project_name=project_name,
        source_root=source_root,
        strategy=answers.strategy,
        rbac=RBACConfig(
            enabled=answers.enable_rbac,
            roles=validate_roles(answers.roles) if answers.enable_rbac else [],
        ),
        orm=detected_orm if answers.use_detected_orm else "none",
        database=answers.database or detected_db or "postgres",
        features=FeaturesConfig(
            refresh_tokens=answers.refresh_tokens,
            rate_limiting=answers.enable_rate_limiting,
            swagger=answers.enable_swagger,
            unit_tests=answers.generate_tests,
            use_username=answers.use_username,
            email_verification=answers.email_verification,
            reset_password=answers.reset_password,
        ),
        jwt=JWTConfig(
            secret=secret or generate_secret(),
            refresh_secret=generate_secret(),
            access_expiration=answers.access_expiration,
            refresh_expiration=answers.refresh_expiration or "7d",
        ),
        auto_install=answers.auto_install,
        timestamp=datetime.now(timezone.utc).isoformat(),
        generator_version=__version__,
    )
