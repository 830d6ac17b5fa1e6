"""Repository Configuration - the `triagebot.toml` a repository opts in with.

Invariants:
    - One optional section per feature; an absent section means the feature is disabled
    - TOML keys are kebab-case (allow-unauthenticated); snake_case is accepted too
    - Unknown sections are ignored so repositories can configure features this bot does not run
    - parse_repo_config raises ValueError with a readable message for any syntax or schema problem
"""

import tomllib

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class FeatureConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class RelabelConfig(FeatureConfig):
    """[relabel] - labels anyone may set, as globs; `!glob` denies."""
    allow_unauthenticated: list[str] = Field(
        default_factory=list, alias="allow-unauthenticated",
    )


class RepoConfig(BaseModel):
    """Parsed triagebot.toml."""
    model_config = ConfigDict(extra="ignore")

    relabel: RelabelConfig | None = None

    def section(self, feature: str) -> FeatureConfig | None:
        return getattr(self, feature, None)


def parse_repo_config(text: str) -> RepoConfig:
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"invalid TOML: {e}") from e
    try:
        return RepoConfig.model_validate(data)
    except ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}"
            for err in e.errors()
        )
        raise ValueError(details) from e
