from enum import Enum
from typing import Optional

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)


class TypeArgumentPolicy(str, Enum):
    """What to do when the component base type does not carry exactly three type arguments."""

    IGNORE = "ignore"
    WARN = "warn"
    ERROR = "error"


class PostprocessSettings(BaseSettings):
    """Settings for the declaration post-processing pass."""

    model_config = SettingsConfigDict(env_prefix="SVELTEDTS_")

    helper_variable: str = Field(
        default="__propDef",
        description=(
            "Name of the synthetic top-level variable whose type carries the "
            "`props`, `events` and `slots` structural types."
        ),
    )
    type_argument_policy: TypeArgumentPolicy = Field(
        default=TypeArgumentPolicy.WARN,
        description=(
            'Behaviour when the base type does not have exactly 3 type arguments: "ignore" '
            'leaves it untouched silently, "warn" leaves it untouched and logs a warning, '
            '"error" fails the pass.'
        ),
    )
    rollback_on_failure: bool = Field(
        default=True,
        description=(
            "If True, a failed pass restores the source file to the text it had "
            "before the pass started."
        ),
    )
    indent_width: int = Field(
        default=4,
        ge=0,
        description="Number of spaces used to indent members of the generated namespace.",
    )


def load_settings(
    env_prefix: Optional[str] = None,
    env_file: Optional[str] = None,
    toml_file: Optional[str] = None,
    json_file: Optional[str] = None,
    **kwargs,
) -> PostprocessSettings:
    """
    Build settings from the environment and optional env/TOML/JSON files.
    Keyword arguments override every other source.
    """
    config_dict = SettingsConfigDict(
        env_prefix=env_prefix if env_prefix is not None else "SVELTEDTS_",
        env_file=env_file,
        toml_file=toml_file,
        json_file=json_file,
    )

    class Settings(PostprocessSettings):
        model_config = config_dict

        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,
            file_secret_settings: PydanticBaseSettingsSource,
        ) -> tuple[PydanticBaseSettingsSource, ...]:
            sources = [init_settings, env_settings, dotenv_settings]
            if toml_file:
                sources.append(TomlConfigSettingsSource(settings_cls))
            if json_file:
                sources.append(JsonConfigSettingsSource(settings_cls))
            return tuple(sources)

    return Settings(**kwargs)
