"""Basic usage example for the code agent workflow."""

import asyncio

from codeagent.db import MessageRepository, init_db
from codeagent.workflow import CodeAgentWorkflow, create_event_client, submit_prompt


async def main():
    """Run a simple prompt through the workflow."""
    print("Starting Code Agent Example")
    print("=" * 50)

    init_db()
    repository = MessageRepository()
    project = repository.create_project("Hello world")

    client = create_event_client(CodeAgentWorkflow(repository=repository))

    prompt = "Create a hello world page"
    print(f"\nPrompt: {prompt}\n")

    result = await submit_prompt(client, repository, project.id, prompt)

    print("\n" + "=" * 50)
    print("RESULTS")
    print("=" * 50)
    print(f"\nPreview: {result['url']}")
    for path in result["files"]:
        print(f"  - {path}")
    print(f"\n{result['summary']}")


if __name__ == "__main__":
    asyncio.run(main())
