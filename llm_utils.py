# llm_utils.py
#
# Purpose:
# This file is the "LLM analysis" layer.
# It takes the raw text of ONE file, sends it to an LLM (Groq), and returns
# a score (0-100) plus markdown reasoning.
#
# How a call works:
# 1) The API key is passed in (config.py reads it once at startup)
# 2) The prompt forces a strict JSON reply: {"score": ..., "reasoning": ...}
# 3) Each attempt ends in one of three outcomes:
#      Success(value)   -> return it
#      Retriable(cause) -> try again (network error, timeout, bad JSON)
#      Fatal(cause)     -> stop now (JSON parsed but has the wrong shape)
# 4) At most MAX_RETRIES attempts, with a short fixed pause in between
# 5) The score is returned exactly as the model gave it (no clamping)

import json                         # The model must answer in JSON
import logging                      # One warning per failed attempt
import math                         # isfinite() for the score check
import time                         # Pause between attempts
from collections import namedtuple  # Small result and outcome records

from groq import Groq               # Groq client (OpenAI-style chat completions)

from config import DEFAULT_MODEL
from errors import AnalysisFailed, ConfigurationError, InvalidArgument, ResponseShapeError

logger = logging.getLogger(__name__)

MAX_RETRIES = 3
RETRY_PAUSE_SECONDS = 1.0
DEFAULT_TIMEOUT = 30

# Generation settings. Low temperature keeps scores consistent between runs.
MAX_TOKENS = 2024
TEMPERATURE = 0.3

PUBLIC_FAILURE_MESSAGE = "Analyzing code quality using AI is tricky business, please try again."

SYSTEM_PROMPT = """
You are a code quality analysis assistant. Provide a score from 0 to 100 and detailed reasoning.

Scoring rules:
- 100 is excellent, production-ready code; 0 is unusable code.
- Code that does not work, or would not compile or run, MUST score below 50,
  no matter how clean, documented or well-structured it is otherwise.

Your reasoning should use Markdown formatting such as headings, bullet points and
code blocks to make it easy to read.

Respond strictly in JSON, with exactly these two keys and nothing else:

{
  "score": <number>,
  "reasoning": "<string with Markdown formatting and escaped quotes>"
}

Do not wrap the JSON in a code fence and do not add any text before or after it.
""".strip()

AnalysisResult = namedtuple("AnalysisResult", ["score", "reasoning"])

# Attempt outcomes (the retry loop only looks at which one it got).
Success = namedtuple("Success", ["value"])
Retriable = namedtuple("Retriable", ["cause"])
Fatal = namedtuple("Fatal", ["cause"])


class RetryState:
    """Attempt bookkeeping for one analyze_code() call."""

    def __init__(self, max_attempts=MAX_RETRIES):
        self.max_attempts = max_attempts
        self.attempts_made = 0

    @property
    def attempts_remaining(self):
        return self.max_attempts - self.attempts_made

    def record_attempt(self):
        if self.attempts_remaining <= 0:
            raise RuntimeError("No attempts remaining.")
        self.attempts_made += 1
        return self.attempts_made

    def exhausted(self):
        return self.attempts_remaining == 0


# ----------------------------
# Prompt
# ----------------------------
def build_messages(code):
    """System rubric + user message with the code verbatim in a fenced block."""
    user = (
        "Please explain quickly what the code does and analyze the quality of the code "
        "in the following file. You can provide code blocks or other Markdown elements "
        "to illustrate your points:\n\n"
        f"```\n{code}\n```\n\n"
        "Provide your analysis in the specified JSON format."
    )
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": user},
    ]


# ----------------------------
# Reply parsing
# ----------------------------
def strip_code_fence(text):
    """
    Models sometimes ignore "raw JSON only" and reply with
        ```json
        {...}
        ```
    If the text starts with a fence line, drop that line and the closing
    fence line. Text that is not fenced comes back unchanged (trimmed).
    """
    cleaned = (text or "").strip()
    if not cleaned.startswith("```"):
        return cleaned

    lines = cleaned.splitlines()
    lines = lines[1:]
    if lines and lines[-1].strip().startswith("```"):
        lines = lines[:-1]
    return "\n".join(lines).strip()


def _is_number(value):
    # bool is a subclass of int in Python, but `true` is not a score.
    if isinstance(value, bool):
        return False
    if not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # An int too big for a float is treated like inf.
        return False


def parse_analysis_reply(text):
    """
    Turn the model's reply text into an AnalysisResult.

    Raises:
      ValueError (json.JSONDecodeError) if the text is not JSON at all
      ResponseShapeError if it is JSON but not {"score": number, "reasoning": string}
    """
    data = json.loads(strip_code_fence(text))

    if not isinstance(data, dict):
        raise ResponseShapeError("Invalid response format from LLM: expected a JSON object.")
    if not _is_number(data.get("score")):
        raise ResponseShapeError("Invalid response format from LLM: score must be a number.")
    if not isinstance(data.get("reasoning"), str):
        raise ResponseShapeError("Invalid response format from LLM: reasoning must be a string.")

    return AnalysisResult(score=data["score"], reasoning=data["reasoning"])


# ----------------------------
# One attempt
# ----------------------------
def make_client(api_key, timeout=DEFAULT_TIMEOUT):
    """
    Groq client with its built-in retries turned off.
    analyze_code() owns the retry loop.
    """
    return Groq(api_key=api_key, timeout=timeout, max_retries=0)


def _attempt(client, model, messages):
    """Run one completion call and classify what happened."""
    try:
        resp = client.chat.completions.create(
            model=model,
            messages=messages,
            max_tokens=MAX_TOKENS,
            temperature=TEMPERATURE,
            top_p=1,
            frequency_penalty=0,
            presence_penalty=0,
        )
        raw = (resp.choices[0].message.content or "").strip()
        return Success(parse_analysis_reply(raw))
    except ResponseShapeError as e:
        return Fatal(e)
    except Exception as e:
        return Retriable(e)


# ----------------------------
# Public entry point
# ----------------------------
def analyze_code(
    code,
    api_key,
    model=DEFAULT_MODEL,
    client=None,
    max_retries=MAX_RETRIES,
    pause_seconds=RETRY_PAUSE_SECONDS,
    timeout=DEFAULT_TIMEOUT,
):
    """
    Score one file's code with the LLM.

    Inputs:
      code: the file text (must not be empty)
      api_key: Groq API key; missing -> ConfigurationError, no call is made
      client: optional pre-built client (tests pass a fake one)

    Returns:
      AnalysisResult(score, reasoning)

    Raises:
      ConfigurationError, InvalidArgument before any call,
      AnalysisFailed when all attempts fail or the reply has the wrong shape.
    """
    if not api_key:
        raise ConfigurationError("Groq API key is not set.")
    if not isinstance(code, str) or code.strip() == "":
        raise InvalidArgument("Code to analyze must be a non-empty string.")
    if max_retries < 1:
        raise InvalidArgument("max_retries must be at least 1.")

    if client is None:
        client = make_client(api_key, timeout=timeout)

    messages = build_messages(code)
    state = RetryState(max_retries)
    outcome = None

    while not state.exhausted():
        attempt = state.record_attempt()
        outcome = _attempt(client, model, messages)

        if isinstance(outcome, Success):
            return outcome.value

        logger.warning(
            "Attempt %d failed: %r. There are %d retries left.",
            attempt,
            outcome.cause,
            0 if isinstance(outcome, Fatal) else state.attempts_remaining,
        )

        if isinstance(outcome, Fatal):
            break

        if not state.exhausted() and pause_seconds:
            time.sleep(pause_seconds)

    logger.error("LLM analysis failed after %d attempt(s): %r", state.attempts_made, outcome.cause)
    raise AnalysisFailed(PUBLIC_FAILURE_MESSAGE, cause=outcome.cause, attempts=state.attempts_made)
