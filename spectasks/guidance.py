"""Guidance and copy text for the spec workflow.

The dependency engine only supplies facts about a task; everything a
person reads (prompts, next steps, tips) comes from a guidance provider.
``DefaultGuidanceProvider`` is the stock implementation and can be
swapped for any object satisfying :class:`GuidanceProvider`.
"""

from __future__ import annotations

from typing import Any, Dict, List, Protocol

from .models import ContextualHelp, DependencyStatus, GuidanceStep, SpecPhase, Task


class GuidanceProvider(Protocol):
    def guidance(self, phase: SpecPhase, context: Dict[str, Any]) -> ContextualHelp: ...

    def task_prompts(self, task: Task) -> List[str]: ...

    def task_next_steps(self, task: Task, dependency_status: DependencyStatus) -> List[str]: ...

    def task_help(self, task: Task, help: ContextualHelp) -> str: ...


class DefaultGuidanceProvider:
    """Stock guidance text for each workflow phase."""

    def guidance(self, phase: SpecPhase, context: Dict[str, Any]) -> ContextualHelp:
        builders = {
            SpecPhase.REQUIREMENTS: self._requirements_guidance,
            SpecPhase.DESIGN: self._design_guidance,
            SpecPhase.TASKS: self._tasks_guidance,
            SpecPhase.EXECUTION: self._execution_guidance,
        }
        return builders[SpecPhase(phase)](context)

    # ------------------------------------------------------------------
    # Phase guidance
    # ------------------------------------------------------------------

    def _requirements_guidance(self, context: Dict[str, Any]) -> ContextualHelp:
        steps = [self._document_step(context, "requirements", "Requirements Document")]
        steps.extend(self._validation_steps(context))
        steps.append(GuidanceStep(
            id="review-acceptance-criteria",
            title="Review Acceptance Criteria",
            description="Ensure each story has testable acceptance criteria",
        ))
        return ContextualHelp(
            phase=SpecPhase.REQUIREMENTS,
            steps=steps,
            tips=[
                "Start with user stories: 'As a [role], I want [feature], so that [benefit]'",
                "Use EARS format for acceptance criteria: 'WHEN [event] THEN [system] SHALL [response]'",
                "Consider edge cases and error scenarios early",
            ],
            common_issues=[
                {"issue": "Vague requirements", "solution": "Make every acceptance criterion testable"},
            ],
        )

    def _design_guidance(self, context: Dict[str, Any]) -> ContextualHelp:
        steps = [self._document_step(context, "design", "Design Document")]
        steps.extend(self._validation_steps(context))
        return ContextualHelp(
            phase=SpecPhase.DESIGN,
            steps=steps,
            tips=[
                "Map every component back to a requirement",
                "Describe data models and error handling explicitly",
            ],
            common_issues=[
                {"issue": "Design drifts from requirements", "solution": "Reference requirement ids in each section"},
            ],
        )

    def _tasks_guidance(self, context: Dict[str, Any]) -> ContextualHelp:
        steps = [self._document_step(context, "tasks", "Task List")]
        steps.append(GuidanceStep(
            id="check-dependencies",
            title="Check Task Dependencies",
            description="Declare '_Depends on: task-N_' wherever order matters",
        ))
        return ContextualHelp(
            phase=SpecPhase.TASKS,
            steps=steps,
            tips=[
                "Break down complex features into small, manageable tasks",
                "Reference specific requirements in each task",
                "Order tasks to build incrementally",
            ],
            common_issues=[
                {"issue": "Tasks are too large", "solution": "Break down large tasks into smaller sub-tasks"},
                {"issue": "Missing requirement references", "solution": "Add requirement references to each task"},
            ],
        )

    def _execution_guidance(self, context: Dict[str, Any]) -> ContextualHelp:
        completed = context.get("completed_tasks", 0)
        total = context.get("total_tasks", 0)

        if completed == 0:
            first = GuidanceStep(
                id="start-first-task",
                title="Start Your First Task",
                description="Begin with the recommended task in your implementation plan",
                priority="high",
                category="next-step",
            )
        elif completed < total:
            percentage = (200 * completed + total) // (2 * total)
            first = GuidanceStep(
                id="continue-tasks",
                title="Continue Implementation",
                description=f"{completed}/{total} tasks completed ({percentage}%)",
                priority="high",
                category="next-step",
            )
        else:
            first = GuidanceStep(
                id="review-completion",
                title="Review Completed Feature",
                description="All tasks completed! Review and test your implementation",
                priority="high",
                category="next-step",
            )

        return ContextualHelp(
            phase=SpecPhase.EXECUTION,
            steps=[
                first,
                GuidanceStep(
                    id="run-tests",
                    title="Run Tests",
                    description="Verify your implementation works correctly",
                ),
            ],
            tips=[
                "Focus on one task at a time",
                "Write tests as you implement",
                "Verify functionality before marking complete",
            ],
            common_issues=[
                {"issue": "Task is blocked", "solution": "Complete the tasks listed under 'Depends on' first"},
            ],
        )

    def _document_step(self, context: Dict[str, Any], name: str, title: str) -> GuidanceStep:
        if not context.get("has_files"):
            return GuidanceStep(
                id=f"create-{name}",
                title=f"Create {title}",
                description=f"Write {name}.md for this feature",
                priority="high",
                category="next-step",
            )
        return GuidanceStep(
            id=f"review-{name}",
            title=f"Review {title}",
            description=f"Refine {name}.md before moving on",
            priority="high",
            category="next-step",
        )

    def _validation_steps(self, context: Dict[str, Any]) -> List[GuidanceStep]:
        errors = context.get("validation_errors") or []
        if not errors:
            return []
        return [GuidanceStep(
            id="fix-validation",
            title="Fix Validation Issues",
            description=f"Resolve {len(errors)} validation issues before proceeding",
            priority="high",
            category="warning",
        )]

    # ------------------------------------------------------------------
    # Task execution copy
    # ------------------------------------------------------------------

    def task_prompts(self, task: Task) -> List[str]:
        prompts = [f"Execute task: {task.title}"]
        if task.requirements:
            prompts.append(
                f'Execute task "{task.title}" addressing requirements: {", ".join(task.requirements)}'
            )
        if task.context_files:
            prompts.append(
                f'Execute task "{task.title}" considering context files: {", ".join(task.context_files)}'
            )

        detailed = [f'Execute implementation task: "{task.title}"', ""]
        detailed.extend(task.description_lines)
        if task.requirements:
            detailed.append(f"Requirements addressed: {', '.join(task.requirements)}")
        if task.context_files:
            detailed.append(f"Context files: {', '.join(task.context_files)}")
        detailed.append("")
        detailed.append(
            "Focus only on this specific task. Implement the code, create tests if needed, "
            "and ensure it integrates with previous work."
        )
        prompts.append("\n".join(detailed))
        return prompts

    def task_next_steps(self, task: Task, dependency_status: DependencyStatus) -> List[str]:
        if not dependency_status.can_execute:
            return [f"Complete dependencies first: {', '.join(dependency_status.unmet_dependency_ids)}"]
        if task.completed:
            return ["This task is already complete", "Pick the next recommended task"]

        steps = [
            "Copy the execution prompt",
            "Implement the task",
            "Test the implementation",
            f"Mark {task.id} as complete when done",
        ]
        if dependency_status.enables:
            steps.append(f"This will unlock: {', '.join(dependency_status.enables)}")
        return steps

    def task_help(self, task: Task, help: ContextualHelp) -> str:
        lines = [f"Task: {task.title}", ""]
        if task.requirements:
            lines.append(f"This task addresses requirements: {', '.join(task.requirements)}")
            lines.append("")
        if help.tips:
            lines.append("Tips:")
            lines.extend(f"- {tip}" for tip in help.tips)
        return "\n".join(lines)
