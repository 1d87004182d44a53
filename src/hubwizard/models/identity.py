"""Hub identity schemes and the color palette."""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class PaletteColor(BaseModel):
    """Named palette color in the hue/saturation/value model."""

    model_config = ConfigDict(frozen=True)

    name: str
    hue: int = Field(..., ge=0, lt=360, description="Hue in degrees")
    saturation: int = Field(..., ge=0, le=100, description="Saturation in percent")
    value: int = Field(..., ge=0, le=100, description="Value (brightness) in percent")


PALETTE: tuple[PaletteColor, ...] = (
    PaletteColor(name="red", hue=0, saturation=100, value=100),
    PaletteColor(name="orange", hue=30, saturation=100, value=100),
    PaletteColor(name="yellow", hue=60, saturation=100, value=100),
    PaletteColor(name="green", hue=120, saturation=100, value=100),
    PaletteColor(name="cyan", hue=180, saturation=100, value=100),
    PaletteColor(name="blue", hue=240, saturation=100, value=100),
    PaletteColor(name="violet", hue=270, saturation=100, value=100),
    PaletteColor(name="magenta", hue=300, saturation=100, value=100),
    PaletteColor(name="white", hue=0, saturation=0, value=100),
    PaletteColor(name="gray", hue=0, saturation=0, value=50),
    PaletteColor(name="black", hue=0, saturation=0, value=0),
)

PALETTE_BY_NAME: dict[str, PaletteColor] = {c.name: c for c in PALETTE}


class FreeTextIdentity(BaseModel):
    """Hub number typed by the user (digits only)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    name: str = ""


class ColorPairIdentity(BaseModel):
    """Ordered pair of palette colors."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["colors"] = "colors"
    primary: str
    secondary: str


IdentityScheme = Annotated[
    Union[FreeTextIdentity, ColorPairIdentity], Field(discriminator="kind")
]
