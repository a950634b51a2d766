from langchain_core.messages import HumanMessage
from langchain_google_genai import ChatGoogleGenerativeAI
from util.secrets import get_gemini_api_key
from util.logging_util import setup_logger, log_llm_interaction
import time

logger = setup_logger(__name__)

DEFAULT_MODEL_NAME = "gemini-3-flash-preview"


def _response_text(response_content) -> str:
    # Gemini returns content as a list of parts, extract the text
    if isinstance(response_content, list):
        text_parts = [part.get('text', '') for part in response_content if isinstance(part, dict) and 'text' in part]
        return ''.join(text_parts)
    return response_content


def get_llm_completion(prompt: str, model_name: str = DEFAULT_MODEL_NAME, temperature: float = 0.3) -> str:
    """
    Sends an already rendered prompt to the LLM and returns the text of its reply.

    Args:
        prompt: The full prompt text.
        model_name: The name of the Gemini model to use. Defaults to "gemini-3-flash-preview".
        temperature: Sampling temperature.

    Returns:
        The string response from the LLM.
    """
    start_time = time.time()

    llm = ChatGoogleGenerativeAI(
        model=model_name,
        google_api_key=get_gemini_api_key(),
        temperature=temperature,
    )

    response = llm.invoke([HumanMessage(content=prompt)])
    response_content = _response_text(response.content)

    duration_ms = (time.time() - start_time) * 1000
    log_llm_interaction(logger, prompt, response_content, model_name, duration_ms)

    return response_content


class GeminiClient:
    """Text-in/text-out model client used by the curation pipeline."""

    def __init__(self, model_name: str = DEFAULT_MODEL_NAME, temperature: float = 0.3):
        self.model_name = model_name
        self.temperature = temperature

    def complete(self, request_text: str) -> str:
        return get_llm_completion(request_text, self.model_name, self.temperature)
