"""Example: register an SOP-style workflow and run it a few times concurrently.

Run with:
    python guides/sop_workflow_example.py

or through the CLI:
    stepline workflow run guides/sop_workflow_example.py:register_workflows sop-onboarding -i client=Acme
"""

import asyncio
import random

from stepline import StepLineConfig, WorkflowDefinition, WorkflowEngine, WorkflowStep


async def parse_document(ctx):
    ctx.log(f"Parsing SOP for {ctx.inputs['client']}")
    return {"title": f"{ctx.inputs['client']} onboarding", "tasks": ["kickoff", "access", "report"]}


async def create_tasks(ctx):
    # Simulates a flaky downstream API.
    if random.random() < 0.5:
        raise ConnectionError("task service unavailable")
    tasks = ctx.results["parse"]["tasks"]
    ctx.state["created"] = len(tasks)
    return tasks


async def queue_for_later(error, ctx):
    ctx.log(f"Queued task creation for later: {error}")
    return []


async def notify(ctx):
    return f"Created {ctx.state.get('created', 0)} tasks for {ctx.inputs['client']}"


def register_workflows(engine: WorkflowEngine) -> None:
    engine.register(
        WorkflowDefinition(
            name="sop-onboarding",
            description="Turn an onboarding SOP into tasks and notify the team",
            category="Operations",
            tags=("sop", "onboarding"),
            inputs={
                "client": {"type": "string", "required": True},
                "notify": {"type": "boolean", "default": True},
            },
            steps=(
                WorkflowStep(id="parse", description="Parse the SOP document", action=parse_document),
                WorkflowStep(
                    id="tasks",
                    description="Create one task per SOP item",
                    action=create_tasks,
                    retries=2,
                    retry_delay=100,
                    on_error=queue_for_later,
                ),
                WorkflowStep(
                    id="notify",
                    action=notify,
                    condition=lambda ctx: bool(ctx.inputs.get("notify")),
                ),
            ),
        )
    )


async def main():
    engine = WorkflowEngine(config=StepLineConfig())
    register_workflows(engine)

    results = await asyncio.gather(
        *(engine.run("sop-onboarding", {"client": name}) for name in ("Acme", "Globex", "Initech"))
    )
    for result in results:
        print(result.workflow, result.success, result.step_results.get("notify"))

    print(engine.get_stats().model_dump())


if __name__ == "__main__":
    asyncio.run(main())
