# examples/quickstart.py
"""
Quickstart — failover router via dict config.

Run with:
  OPENROUTER_API_KEY=... python examples/quickstart.py
"""

import asyncio
import os

from route_failover import AllAttemptsFailed, FailoverRouter


async def log_attempt(event):
    status = "ok" if event.ok else f"failed: {event.error}"
    print(f"  #{event.attempt_number} {event.model_name} ({event.key_name}) {status}")


async def main():
    router = FailoverRouter.from_dict(
        {
            "credentials": [
                {"key_name": "primary", "api_key": os.environ["OPENROUTER_API_KEY"]},
                {"key_name": "backup", "api_key": os.environ.get("OPENROUTER_BACKUP_KEY", "sk-invalid")},
            ],
            "models": [
                {"model_name": "meta-llama/llama-3.1-8b-instruct:free", "display_name": "Llama 3.1 8B"},
                {"model_name": "openai/gpt-4o-mini", "display_name": "GPT-4o mini"},
            ],
        },
        on_attempt=log_attempt,
    )

    async with router:
        try:
            result = await router.route("Summarise the benefits of functional programming.")
        except AllAttemptsFailed as exc:
            print(f"Every pair failed. Last error: {exc.last_error}")
            return

        print(f"Response: {result.response[:200]}...")
        print(f"Model:    {result.model_display_name} ({result.model_used})")
        print(f"Key:      {result.key_used}")
        print(f"Usage:    {result.usage}")


if __name__ == "__main__":
    asyncio.run(main())
