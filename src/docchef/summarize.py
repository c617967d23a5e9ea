"""Turn extracted source code into docstring-style documentation with an LLM."""

import logging
import re

from openai import OpenAI

from docchef.config import SummarizeConfig
from docchef.errors import SummarizerNotConfigured

logger = logging.getLogger(__name__)

_DISPLAY_MATH = re.compile(r"\$\$(.*?)\$\$", re.DOTALL)


def build_prompt(code: str) -> str:
    return f"""\
Generate a Python docstring for the following Python definition:

```python
{code}
```

Always show the signature of the function at the top of the documentation, \
with a four-space indent so that it is printed as Python code.

Just return the output as string.
Do not add codefence.
"""


def postprocess_content(content: str) -> str:
    """Strip docstring quotes and code fences, and fence display math.

    Models often wrap the answer in triple quotes or a code fence despite
    being told not to; the first and last such lines are dropped.
    """
    lines = content.strip().split("\n")
    if lines and lines[0].lstrip().startswith(('"""', "'''", "```")):
        lines.pop(0)
    if lines and lines[-1].lstrip().startswith(('"""', "'''", "```")):
        lines.pop()

    doc = "\n".join(lines)
    return _DISPLAY_MATH.sub(r"```math\1```", doc)


class Summarizer:
    """Chat-completions client that documents a piece of code."""

    def __init__(self, config: SummarizeConfig, client: OpenAI | None = None):
        if client is None:
            if not config.api_key:
                raise SummarizerNotConfigured(
                    "No API key configured for the summarization service"
                )
            client = OpenAI(api_key=config.api_key, base_url=config.base_url)

        self.config = config
        self.client = client

    def summarize(self, code: str) -> str:
        """Return documentation text for `code`."""
        logger.debug("Requesting summary from %s", self.config.model)
        response = self.client.chat.completions.create(
            model=self.config.model,
            messages=[{"role": "user", "content": build_prompt(code)}],
        )
        content = response.choices[0].message.content or ""
        return postprocess_content(content)
