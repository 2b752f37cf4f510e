"""Application settings loaded from environment variables or .env."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from depmatrix.analysis.models import NormalizationParams


def _find_env_files() -> list[Path]:
    """.env files for pydantic-settings, lowest priority first.

    The checkout next to the package comes first, then the nearest .env at or
    above the working directory, so a project-local file overrides it.
    """
    found: list[Path] = []
    repo_env = Path(__file__).resolve().parent.parent / ".env"
    if repo_env.is_file():
        found.append(repo_env)

    here = Path.cwd().resolve()
    nearest = next((d / ".env" for d in (here, *here.parents) if (d / ".env").is_file()), None)
    if nearest is not None and nearest not in found:
        found.append(nearest)
    return found


class DepMatrixSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="DEPMATRIX_",
        env_file=_find_env_files(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Normalization ranges (categories and sub-attributes default differently)
    original_min: float = 1.0
    original_max: float = 9.0
    category_new_min: float = 1.0
    category_new_max: float = 9.0
    sub_attribute_new_min: float = 1.0
    sub_attribute_new_max: float = 10.0

    # Submissions
    min_submissions_required: int = 3
    submission_action: str = "submit_matrix"
    excluded_usernames: list[str] = Field(default_factory=lambda: ["admin"])

    # Output
    output_dir: Path | None = None

    # Server
    port: int = 8160

    def category_params(self) -> NormalizationParams:
        return NormalizationParams(
            new_min=self.category_new_min,
            new_max=self.category_new_max,
            original_min=self.original_min,
            original_max=self.original_max,
        )

    def sub_attribute_params(self) -> NormalizationParams:
        return NormalizationParams(
            new_min=self.sub_attribute_new_min,
            new_max=self.sub_attribute_new_max,
            original_min=self.original_min,
            original_max=self.original_max,
        )


def load_settings(**overrides: object) -> DepMatrixSettings:
    """Load settings with optional CLI overrides.

    ``None`` overrides are dropped so unset CLI options fall through to the
    environment and defaults.
    """
    cleaned = {key: value for key, value in overrides.items() if value is not None}
    return DepMatrixSettings(**cleaned)  # type: ignore[arg-type]
