from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session

from eod_assistant.models import UserProfile
from eod_assistant.settings import Settings


@dataclass(frozen=True)
class UserCredentials:
    github_token: str | None
    github_username: str | None
    jira_email: str | None
    jira_api_token: str | None
    slack_webhook_url: str | None
    llm_api_key: str | None
    llm_base_url: str | None
    llm_model: str | None


def get_user_credentials(db: Session, settings: Settings) -> UserCredentials:
    """Resolve credentials from the stored profile, falling back to settings.

    The application is single-user, so the oldest profile is the only one
    that matters. Empty stored values fall through to the environment.
    """

    profile = db.scalar(
        select(UserProfile).order_by(UserProfile.created_at.asc(), UserProfile.id.asc())
    )

    return UserCredentials(
        github_token=(profile and profile.github_token) or settings.github_token,
        github_username=(profile and profile.github_username)
        or settings.github_username,
        jira_email=(profile and profile.jira_email) or settings.jira_email,
        jira_api_token=(profile and profile.jira_api_token) or settings.jira_api_token,
        slack_webhook_url=(profile and profile.slack_webhook_url)
        or settings.slack_default_webhook_url,
        llm_api_key=(profile and profile.llm_api_key) or settings.llm_api_key,
        llm_base_url=(profile and profile.llm_base_url) or settings.llm_base_url,
        llm_model=(profile and profile.llm_model) or settings.llm_model,
    )
