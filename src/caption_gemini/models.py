"""Core data models for caption nodes."""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Literal, Protocol, TypeAlias

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing_extensions import TypedDict

# ==================== Type Aliases ====================
AnyDict: TypeAlias = dict[str, Any]

GeminiModel = Literal[
    "gemini-1.5-flash-latest",
    "gemini-1.5-pro-latest",
    "gemini-1.0-pro-latest",
]

DEFAULT_MODEL: GeminiModel = "gemini-1.5-flash-latest"
DEFAULT_CONTENT_TYPE = "video/mp4"
DEFAULT_PROMPT = (
    "Gere o subtitle para esse video, escreva o subtitle em formato de SRT, "
    "retorna isso no idioma original do video. seja fiel nas palavras do video."
)


# ==================== Prompt Modes ====================


class DefaultPromptMode(BaseModel):
    """Built-in subtitle prompt. Always requests structured output."""

    mode: Literal["default"] = "default"

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    @property
    def prompt(self) -> str:
        return DEFAULT_PROMPT

    @property
    def structured(self) -> bool:
        return True


class CustomPromptMode(BaseModel):
    """User-supplied prompt, with or without the subtitle schema."""

    mode: Literal["custom"] = "custom"
    text: str = Field(description="Prompt sent verbatim to the model.")
    structured: bool = Field(
        default=True, description="Constrain the response to the subtitle schema."
    )

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    @property
    def prompt(self) -> str:
        return self.text


PromptMode = DefaultPromptMode | CustomPromptMode


# ==================== Configuration ====================


class CaptionConfig(BaseModel):
    """Provider configuration for one captioning call.

    Built fresh for every item, since the API key and model are item-level
    parameters in the host.
    """

    model: str = Field(description="Model identifier, e.g. 'gemini-1.5-flash-latest'.")
    provider: str = Field(default="google", description="Provider identifier.")
    api_key: str = Field(default="", description="API key for the provider.")

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)


class CaptionNodeParameters(BaseModel):
    """Parameters of the Caption Gemini node, resolved for a single item."""

    api_key: str = Field(default="", description="Gemini API key.")
    media_url: str = Field(default="", description="URL of the media to caption.")
    model: GeminiModel = Field(default=DEFAULT_MODEL)
    content_type: str = Field(default=DEFAULT_CONTENT_TYPE)
    prompt_mode: PromptMode = Field(
        default_factory=DefaultPromptMode, discriminator="mode"
    )

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    def to_config(self) -> CaptionConfig:
        return CaptionConfig(model=self.model, api_key=self.api_key)

    def to_request(self) -> "CaptionRequest":
        return CaptionRequest(
            prompt=self.prompt_mode.prompt,
            media=MediaReference(url=self.media_url, content_type=self.content_type),
            model=self.model,
            structured=self.prompt_mode.structured,
        )


# ==================== Request / Result ====================


class MediaReference(BaseModel):
    """Remote media attached to a captioning request."""

    url: str
    content_type: str = DEFAULT_CONTENT_TYPE


class CaptionRequest(BaseModel):
    """A single captioning call: prompt, media and output mode."""

    prompt: str
    media: MediaReference
    model: str = DEFAULT_MODEL
    structured: bool = True


class Subtitle(BaseModel):
    """One subtitle cue."""

    startTime: str
    endTime: str
    text: str


class SubtitleTrack(BaseModel):
    """Structured caption output: an ordered list of subtitle cues."""

    subtitles: list[Subtitle]


class TextCaption(BaseModel):
    """Free-text caption output."""

    text: str


CaptionResult = SubtitleTrack | TextCaption


# ==================== Node Items ====================


class PairedItemDict(TypedDict):
    item: int


class NodeItemDict(TypedDict, total=False):
    json: AnyDict
    pairedItem: PairedItemDict
    error: str


@dataclass
class PairedItem:
    """Link from an output item back to the input position that produced it."""

    item: int


@dataclass
class NodeItem:
    """A data item flowing between nodes."""

    json: AnyDict = field(default_factory=dict)
    paired_item: PairedItem | None = None
    error: Exception | None = None

    def to_dict(self) -> NodeItemDict:
        data: NodeItemDict = {"json": self.json}
        if self.paired_item is not None:
            data["pairedItem"] = {"item": self.paired_item.item}
        if self.error is not None:
            data["error"] = str(self.error)
        return data


# ==================== Descriptors ====================


class _Descriptor(BaseModel):
    model_config: ClassVar[ConfigDict] = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    def to_dict(self) -> AnyDict:
        return self.model_dump(by_alias=True, exclude_none=True)


class PropertyOption(_Descriptor):
    name: str
    value: str | int | bool


class DisplayOptions(_Descriptor):
    show: dict[str, list[Any]] | None = None
    hide: dict[str, list[Any]] | None = None


class NodeProperty(_Descriptor):
    """A parameter declared by a node or credential type."""

    display_name: str
    name: str
    type: Literal["string", "boolean", "number", "options"]
    default: Any
    required: bool | None = None
    placeholder: str | None = None
    description: str | None = None
    options: list[PropertyOption] | None = None
    display_options: DisplayOptions | None = None
    type_options: AnyDict | None = None

    def is_visible(self, values: AnyDict) -> bool:
        """Whether this property is shown given the other parameter values."""
        if self.display_options is None:
            return True
        for name, allowed in (self.display_options.show or {}).items():
            if values.get(name) not in allowed:
                return False
        for name, hidden in (self.display_options.hide or {}).items():
            if values.get(name) in hidden:
                return False
        return True


class NodeTypeDescription(_Descriptor):
    """Static description of a node type, as registered with the host."""

    display_name: str
    name: str
    icon: str | None = None
    group: list[str] = Field(default_factory=list)
    version: int = 1
    subtitle: str | None = None
    description: str = ""
    defaults: AnyDict = Field(default_factory=dict)
    inputs: list[str] = Field(default_factory=lambda: ["main"])
    outputs: list[str] = Field(default_factory=lambda: ["main"])
    credentials: list[AnyDict] | None = None
    properties: list[NodeProperty] = Field(default_factory=list)

    def get_property(self, name: str) -> NodeProperty | None:
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None


class CredentialTypeDescription(_Descriptor):
    """Static description of a credential type."""

    name: str
    display_name: str
    documentation_url: str | None = None
    properties: list[NodeProperty] = Field(default_factory=list)


# ==================== Provider Protocol ====================


class CaptionHandler(Protocol):
    """Protocol implemented by caption providers.

    Example:
        ```python
        class StaticHandler:
            async def generate_caption_async(self, config, request):
                return TextCaption(text="hello")

            def generate_caption(self, config, request):
                return TextCaption(text="hello")
        ```
    """

    async def generate_caption_async(
        self, config: CaptionConfig, request: CaptionRequest
    ) -> CaptionResult:
        """Generate a caption without blocking the event loop."""
        ...

    def generate_caption(
        self, config: CaptionConfig, request: CaptionRequest
    ) -> CaptionResult:
        """Generate a caption, blocking until the provider responds."""
        ...
