from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from invoice_engine.domain.models.layout import LayoutBudgets


class Settings(BaseSettings):
    # Read env from the process + optionally from a local .env
    model_config = SettingsConfigDict(
        env_file=(".env",),
        extra="ignore",
        case_sensitive=False,
    )

    # App
    ENVIRONMENT: str = Field(default="dev", validation_alias=AliasChoices("ENVIRONMENT", "environment"))
    APP_NAME: str = Field(default="invoice_engine", validation_alias=AliasChoices("APP_NAME", "app_name"))
    LOG_LEVEL: str = Field(default="INFO", validation_alias=AliasChoices("LOG_LEVEL", "log_level"))

    # Layout defaults (points); any subset may be overridden per call
    LAYOUT_PAGE_USABLE_HEIGHT: float = Field(
        default=770.0, validation_alias=AliasChoices("LAYOUT_PAGE_USABLE_HEIGHT", "layout_page_usable_height")
    )
    LAYOUT_HEADER_HEIGHT: float = Field(
        default=175.0, validation_alias=AliasChoices("LAYOUT_HEADER_HEIGHT", "layout_header_height")
    )
    LAYOUT_TABLE_HEADER_HEIGHT: float = Field(
        default=35.0, validation_alias=AliasChoices("LAYOUT_TABLE_HEADER_HEIGHT", "layout_table_header_height")
    )
    LAYOUT_LINE_HEIGHT: float = Field(
        default=10.0, validation_alias=AliasChoices("LAYOUT_LINE_HEIGHT", "layout_line_height")
    )
    LAYOUT_VERTICAL_PADDING: float = Field(
        default=8.0, validation_alias=AliasChoices("LAYOUT_VERTICAL_PADDING", "layout_vertical_padding")
    )
    LAYOUT_CHAR_WIDTH_FACTOR: float = Field(
        default=0.5, validation_alias=AliasChoices("LAYOUT_CHAR_WIDTH_FACTOR", "layout_char_width_factor")
    )
    LAYOUT_LAST_PAGE_FOOTER_RESERVE: float = Field(
        default=240.0,
        validation_alias=AliasChoices("LAYOUT_LAST_PAGE_FOOTER_RESERVE", "layout_last_page_footer_reserve"),
    )
    LAYOUT_FALLBACK_ITEMS_PER_PAGE: int = Field(
        default=34,
        ge=1,
        validation_alias=AliasChoices("LAYOUT_FALLBACK_ITEMS_PER_PAGE", "layout_fallback_items_per_page"),
    )

    def layout_budgets(self, **overrides) -> LayoutBudgets:
        values = {
            "page_usable_height": self.LAYOUT_PAGE_USABLE_HEIGHT,
            "header_height": self.LAYOUT_HEADER_HEIGHT,
            "table_header_height": self.LAYOUT_TABLE_HEADER_HEIGHT,
            "line_height_constant": self.LAYOUT_LINE_HEIGHT,
            "vertical_padding_constant": self.LAYOUT_VERTICAL_PADDING,
            "char_width_factor": self.LAYOUT_CHAR_WIDTH_FACTOR,
            "last_page_footer_reserve": self.LAYOUT_LAST_PAGE_FOOTER_RESERVE,
            "fallback_items_per_page": self.LAYOUT_FALLBACK_ITEMS_PER_PAGE,
        }
        values.update(overrides)
        return LayoutBudgets(**values)


settings = Settings()


def default_layout_budgets(**overrides) -> LayoutBudgets:
    return settings.layout_budgets(**overrides)
