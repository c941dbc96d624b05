"""Simulated AI assistant chat.

Replies are canned, streamed character by character, and a build/create
request additionally walks the chat generation steps and hands back a small
set of generated files for the workspace.
"""

from collections.abc import AsyncIterator, Callable
from datetime import UTC, datetime
from typing import Literal
import uuid

from pydantic import BaseModel, Field
import structlog

from appforge.contracts.files import CodeFile
from appforge.errors import GenerationCancelled
from appforge.generation.cancellation import CancellationToken
from appforge.generation.steps import CHAT_STEP_LABELS

logger = structlog.get_logger(__name__)

GREETING = (
    "Hi! I'm your AI coding assistant. I can help you build full-stack applications, "
    "generate code, debug issues, and answer technical questions. "
    "What would you like to create today?"
)

BUILD_REPLY = """I'll help you build that! Let me analyze your requirements and generate the code structure.

Here's what I'll create for you:

```typescript
// App.tsx - Main application component
import React from 'react'
import { BrowserRouter as Router, Routes, Route } from 'react-router-dom'
import HomePage from './pages/HomePage'
import Dashboard from './pages/Dashboard'

function App() {
  return (
    <Router>
      <Routes>
        <Route path="/" element={<HomePage />} />
        <Route path="/dashboard" element={<Dashboard />} />
      </Routes>
    </Router>
  )
}

export default App
```

I'm generating the complete application structure with:
- Modern React with TypeScript
- Responsive design with Tailwind CSS
- Component-based architecture
- Routing setup
- State management

Would you like me to add any specific features or modify the structure?"""

DEBUG_REPLY = """I can help you debug that issue! Based on the error, here are the most likely causes and solutions:

1. **Check your imports** - Make sure all components are properly imported
2. **Verify prop types** - Ensure you're passing the correct data types
3. **Look for typos** - Check variable names and function calls
4. **Add logging** - Trace the values flowing into the failing code

Could you share the specific error message or code snippet you're having trouble with?"""

DEFAULT_REPLY = """I understand you want to {request}. I can definitely help with that!

Let me break this down into steps:
1. First, I'll analyze your requirements
2. Then I'll design the optimal architecture
3. Finally, I'll generate clean, production-ready code

What specific features or technologies would you like me to focus on?"""

ERROR_REPLY = "Sorry, I encountered an error. Please try again."

CHAT_GENERATED_FILES = (
    CodeFile(path="src/App.tsx", content="// Generated App component", language="typescript"),
    CodeFile(
        path="src/components/Header.tsx",
        content="// Generated Header component",
        language="typescript",
    ),
)

StepListener = Callable[[int, int, str], None]


class ChatMessage(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    is_streaming: bool = False


class ChatTurn(BaseModel):
    """Outcome of one user message: the assistant reply and any generated files."""

    reply: ChatMessage
    files: list[CodeFile] = Field(default_factory=list)
    cancelled: bool = False


def _is_build_request(text: str) -> bool:
    lowered = text.lower()
    return "build" in lowered or "create" in lowered


def _is_debug_request(text: str) -> bool:
    lowered = text.lower()
    return "debug" in lowered or "error" in lowered


class AssistantSimulator:
    """Canned assistant with streamed replies and simulated code generation."""

    def __init__(
        self,
        think_delay: float = 1.0,
        stream_delay: float = 0.02,
        step_delay: float = 0.8,
    ) -> None:
        self.think_delay = think_delay
        self.stream_delay = stream_delay
        self.step_delay = step_delay
        self.history: list[ChatMessage] = [ChatMessage(role="assistant", content=GREETING)]

    def compose_reply(self, text: str) -> str:
        if _is_build_request(text):
            return BUILD_REPLY
        if _is_debug_request(text):
            return DEBUG_REPLY
        return DEFAULT_REPLY.format(request=text.strip())

    @staticmethod
    def triggers_generation(text: str, reply: str) -> bool:
        return "```" in reply or _is_build_request(text)

    async def stream_reply(self, reply: str, token: CancellationToken) -> AsyncIterator[str]:
        """Yield the reply's growing content one character at a time."""
        content = ""
        for char in reply:
            token.raise_if_cancelled()
            content += char
            yield content
            await token.sleep(self.stream_delay)

    async def simulate_code_generation(
        self,
        token: CancellationToken,
        on_step: StepListener | None = None,
    ) -> list[CodeFile]:
        total = len(CHAT_STEP_LABELS)
        for index, label in enumerate(CHAT_STEP_LABELS, start=1):
            token.raise_if_cancelled()
            if on_step is not None:
                on_step(index, total, label)
            await token.sleep(self.step_delay)
        return list(CHAT_GENERATED_FILES)

    async def respond(
        self,
        text: str,
        token: CancellationToken | None = None,
        on_chunk: Callable[[str], None] | None = None,
        on_step: StepListener | None = None,
    ) -> ChatTurn:
        """Handle one user message end to end."""
        token = token or CancellationToken()
        self.history.append(ChatMessage(role="user", content=text))
        reply = ChatMessage(role="assistant", content="", is_streaming=True)
        self.history.append(reply)

        try:
            await token.sleep(self.think_delay)
            full_reply = self.compose_reply(text)
            async for content in self.stream_reply(full_reply, token):
                reply.content = content
                if on_chunk is not None:
                    on_chunk(content)
            reply.is_streaming = False

            files: list[CodeFile] = []
            if self.triggers_generation(text, full_reply):
                files = await self.simulate_code_generation(token, on_step=on_step)
            logger.debug("chat_reply_completed", chars=len(full_reply), files=len(files))
            return ChatTurn(reply=reply, files=files)

        except GenerationCancelled:
            reply.is_streaming = False
            logger.info("chat_reply_cancelled", chars=len(reply.content))
            return ChatTurn(reply=reply, cancelled=True)

        except Exception as e:
            logger.error("chat_reply_failed", error=str(e))
            self.history.remove(reply)
            failure = ChatMessage(role="assistant", content=ERROR_REPLY)
            self.history.append(failure)
            return ChatTurn(reply=failure)
