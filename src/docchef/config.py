"""Configuration management for docchef."""

from dataclasses import dataclass, field
from pathlib import Path

import yaml

from docchef.extract import ExhaustionPolicy

CONFIG_FILE_NAME = ".docchef"


@dataclass
class ExtractConfig:
    """Extraction settings.

    Attributes:
        exhaustion_policy: "fail-open" returns the rest of the file when no
            complete unit is found; "fail-strict" raises instead.
    """
    exhaustion_policy: str = ExhaustionPolicy.FAIL_OPEN.value

    @property
    def policy(self) -> ExhaustionPolicy:
        return ExhaustionPolicy(self.exhaustion_policy)


@dataclass
class SelectConfig:
    """Candidate selection settings.

    Attributes:
        chooser: One of "auto", "fzf", "prompt", "first" or "strict".
    """
    chooser: str = "auto"


@dataclass
class SummarizeConfig:
    """Settings for the LLM summarization service.

    The API key is never read from the environment here; callers pass it in.
    """
    model: str = "gpt-4o-mini"
    api_key: str | None = None
    base_url: str | None = None


@dataclass
class ChefConfig:
    extract: ExtractConfig = field(default_factory=ExtractConfig)
    select: SelectConfig = field(default_factory=SelectConfig)
    summarize: SummarizeConfig = field(default_factory=SummarizeConfig)


def _section(data: dict, name: str) -> dict:
    section = data.get(name, {})
    return section if isinstance(section, dict) else {}


def load_config(repo_root: Path | None = None) -> ChefConfig:
    """Load configuration from the .docchef file in the repository root.

    Args:
        repo_root: Path to repository root. If None, uses current directory.

    Returns:
        ChefConfig with loaded or default values.

    Notes:
        If the file doesn't exist or can't be parsed, returns default config.
        Unknown policy or chooser values also fall back to the defaults.
        Expected YAML structure:

        ```yaml
        extract:
          exhaustion_policy: fail-open
        select:
          chooser: auto
        summarize:
          model: gpt-4o-mini
          base_url: https://api.openai.com/v1
        ```
    """
    if repo_root is None:
        repo_root = Path.cwd()

    config_path = repo_root / CONFIG_FILE_NAME

    if not config_path.exists():
        return ChefConfig()

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f)

        if not isinstance(data, dict):
            return ChefConfig()

        extract = _section(data, "extract")
        select = _section(data, "select")
        summarize = _section(data, "summarize")

        policy = extract.get("exhaustion_policy", ExtractConfig.exhaustion_policy)
        if policy not in {p.value for p in ExhaustionPolicy}:
            policy = ExtractConfig.exhaustion_policy

        chooser = select.get("chooser", SelectConfig.chooser)
        if chooser not in ("auto", "fzf", "prompt", "first", "strict"):
            chooser = SelectConfig.chooser

        return ChefConfig(
            extract=ExtractConfig(exhaustion_policy=policy),
            select=SelectConfig(chooser=chooser),
            summarize=SummarizeConfig(
                model=summarize.get("model", SummarizeConfig.model),
                api_key=summarize.get("api_key"),
                base_url=summarize.get("base_url"),
            ),
        )
    except (yaml.YAMLError, OSError, KeyError, TypeError, ValueError):
        # Return default config on any parsing errors
        return ChefConfig()
