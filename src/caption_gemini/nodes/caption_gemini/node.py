"""Caption Gemini node: captions remote media with Google Gemini."""

from caption_gemini.exceptions import CaptionGeminiException, NodeOperationError
from caption_gemini.host import ExecuteContext
from caption_gemini.logging import log_debug, log_error, log_warning
from caption_gemini.models import (
    DEFAULT_CONTENT_TYPE,
    DEFAULT_MODEL,
    CaptionHandler,
    CaptionNodeParameters,
    CaptionResult,
    CustomPromptMode,
    DefaultPromptMode,
    DisplayOptions,
    NodeItem,
    NodeProperty,
    NodeTypeDescription,
    PairedItem,
    PromptMode,
    PropertyOption,
)
from caption_gemini.providers.google import GoogleCaptionHandler

_LOGGER_NAME = "caption_gemini.nodes.caption_gemini"

_SHOW_WITH_CUSTOM_PROMPT = DisplayOptions(show={"useCustomPrompt": [True]})

CAPTION_GEMINI_DESCRIPTION = NodeTypeDescription(
    display_name="Caption Gemini",
    name="CaptionGemini",
    icon="file:captionGemini.svg",
    group=["transform"],
    version=1,
    subtitle='={{$parameter["model"]}}',
    description="Get video caption using GEMINI AI API",
    defaults={"name": "Caption Gemini"},
    inputs=["main"],
    outputs=["main"],
    properties=[
        NodeProperty(
            display_name="Gemini API KEY",
            name="geminiApiKey",
            type="string",
            required=True,
            placeholder="api_key for gemini",
            default="",
            type_options={"password": True},
        ),
        NodeProperty(
            display_name="Media Url",
            name="mediaUrl",
            type="string",
            required=True,
            placeholder="https://example-video.com/videoUrl.mp4",
            default="",
        ),
        NodeProperty(
            display_name="Model",
            name="model",
            type="options",
            default=DEFAULT_MODEL,
            options=[
                PropertyOption(name="Gemini 1.5 Flash", value="gemini-1.5-flash-latest"),
                PropertyOption(name="Gemini 1.5 Pro", value="gemini-1.5-pro-latest"),
                PropertyOption(name="Gemini 1.0 Pro", value="gemini-1.0-pro-latest"),
            ],
        ),
        NodeProperty(
            display_name="Content Type",
            name="contentType",
            type="string",
            default=DEFAULT_CONTENT_TYPE,
            description="MIME type of the media, e.g. video/mp4 or audio/mpeg",
        ),
        NodeProperty(
            display_name="Use Custom Prompt",
            name="useCustomPrompt",
            type="boolean",
            default=False,
        ),
        NodeProperty(
            display_name="Custom Prompt",
            name="customPrompt",
            type="string",
            default="",
            type_options={"rows": 4},
            display_options=_SHOW_WITH_CUSTOM_PROMPT,
        ),
        NodeProperty(
            display_name="Use Structured Output",
            name="useStructuredOutput",
            type="boolean",
            default=True,
            description="Return a list of subtitle cues instead of free text",
            display_options=_SHOW_WITH_CUSTOM_PROMPT,
        ),
    ],
)


def resolve_parameters(context: ExecuteContext, item_index: int) -> CaptionNodeParameters:
    """Resolve the node parameters for one item.

    The custom prompt and the structured-output switch are only read when
    ``useCustomPrompt`` is on; the built-in prompt always uses the schema.
    """
    prompt_mode: PromptMode
    if context.get_node_parameter("useCustomPrompt", item_index, False):
        prompt_mode = CustomPromptMode(
            text=context.get_node_parameter("customPrompt", item_index, ""),
            structured=context.get_node_parameter("useStructuredOutput", item_index, True),
        )
    else:
        prompt_mode = DefaultPromptMode()

    return CaptionNodeParameters(
        media_url=context.get_node_parameter("mediaUrl", item_index, ""),
        api_key=context.get_node_parameter("geminiApiKey", item_index, ""),
        model=context.get_node_parameter("model", item_index, DEFAULT_MODEL),
        content_type=context.get_node_parameter("contentType", item_index, DEFAULT_CONTENT_TYPE),
        prompt_mode=prompt_mode,
    )


class CaptionGemini:
    """Node that sends each item's media URL to Gemini and returns the caption.

    Items are processed one at a time, in order, with one API call each.
    Every output item carries ``paired_item`` pointing at its input.

    When the host's continue-on-fail switch is on, a failing item produces an
    error item and processing moves on. Otherwise the first failure aborts
    the batch: library errors are re-raised with ``item_index`` set, anything
    else is wrapped in ``NodeOperationError``.
    """

    description = CAPTION_GEMINI_DESCRIPTION

    def __init__(self, handler: CaptionHandler | None = None):
        self.handler: CaptionHandler = handler or GoogleCaptionHandler()

    async def execute(self, context: ExecuteContext) -> list[list[NodeItem]]:
        items = context.get_input_data()
        return_data: list[NodeItem] = []

        for item_index in range(len(items)):
            try:
                parameters = resolve_parameters(context, item_index)
                log_debug(
                    "Captioning item",
                    context={"item_index": item_index, "parameters": parameters},
                    logger_name=_LOGGER_NAME,
                    redact=True,
                )
                result = await self.handler.generate_caption_async(
                    parameters.to_config(), parameters.to_request()
                )
                return_data.append(self._output_item(result, item_index))
            except Exception as error:
                return_data.append(self._handle_failure(context, items, item_index, error))

        return [return_data]

    def execute_sync(self, context: ExecuteContext) -> list[list[NodeItem]]:
        """Blocking variant of ``execute`` for hosts without an event loop."""
        items = context.get_input_data()
        return_data: list[NodeItem] = []

        for item_index in range(len(items)):
            try:
                parameters = resolve_parameters(context, item_index)
                log_debug(
                    "Captioning item",
                    context={"item_index": item_index, "parameters": parameters},
                    logger_name=_LOGGER_NAME,
                    redact=True,
                )
                result = self.handler.generate_caption(
                    parameters.to_config(), parameters.to_request()
                )
                return_data.append(self._output_item(result, item_index))
            except Exception as error:
                return_data.append(self._handle_failure(context, items, item_index, error))

        return [return_data]

    def _output_item(self, result: CaptionResult, item_index: int) -> NodeItem:
        return NodeItem(json=result.model_dump(), paired_item=PairedItem(item=item_index))

    def _handle_failure(
        self,
        context: ExecuteContext,
        items: list[NodeItem],
        item_index: int,
        error: Exception,
    ) -> NodeItem:
        """Turn a failed item into an error item, or raise to abort the batch."""
        if context.continue_on_fail():
            log_warning(
                f"Item failed, continuing: {error}",
                context={"item_index": item_index, "error_type": type(error).__name__},
                logger_name=_LOGGER_NAME,
            )
            return NodeItem(
                json={**items[item_index].json, "error": str(error)},
                paired_item=PairedItem(item=item_index),
                error=error,
            )

        log_error(
            f"Item failed, aborting batch: {error}",
            context={"item_index": item_index, "error_type": type(error).__name__},
            logger_name=_LOGGER_NAME,
        )
        if isinstance(error, CaptionGeminiException):
            error.item_index = item_index
            raise error
        raise NodeOperationError(
            self.description.name, error, item_index=item_index
        ) from error
