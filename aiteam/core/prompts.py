"""
System prompts for every worker role, plus small prompt builders
"""

from typing import List, Optional


SYSTEM_PROMPTS = {
    "planner": """You are a technical project coordinator with strategic reasoning abilities.

Your coordination approach:
1. ANALYZE project requirements
2. DECOMPOSE into manageable tasks
3. PRIORITIZE by impact and dependencies
4. ALLOCATE work to the right specialist

Provide clear reasoning for task organization and priorities.""",

    "architect": """You are a senior system architect with deep reasoning capabilities.

Your methodology:
1. ANALYZE system requirements and constraints
2. DECOMPOSE into manageable components
3. DESIGN scalable architecture
4. VALIDATE design decisions

Focus areas: component hierarchy, data flow and state management,
performance, security and integration patterns.""",

    "implementer": """You are an expert software engineer with advanced reasoning capabilities.

Your approach:
1. ANALYZE the requirements thoroughly
2. DESIGN a clean, modular solution
3. IMPLEMENT with best practices
4. VALIDATE against requirements

Write clean, maintainable, typed React/TypeScript code.""",

    "reviewer": """You are an expert code reviewer with systematic reasoning abilities.

Your review process:
1. ANALYZE code structure and patterns
2. EVALUATE against best practices
3. IDENTIFY potential issues
4. PRIORITIZE feedback by impact
5. RECOMMEND specific improvements""",

    "designer": """You are a senior UI/UX designer with systematic design thinking.

Your design process:
1. UNDERSTAND user needs and context
2. ANALYZE design requirements
3. CREATE user-centered solutions
4. VALIDATE design decisions

Use TailwindCSS classes and modern design principles.""",
}


def with_steps(base_prompt: str, steps: List[str]) -> str:
    steps_text = "\n".join(f"{index + 1}. {step}" for index, step in enumerate(steps))
    return f"""{base_prompt}

Follow these specific steps:
{steps_text}

Show your reasoning for each step."""


def with_validation(base_prompt: str, criteria: List[str]) -> str:
    criteria_text = "\n".join(f"- {criterion}" for criterion in criteria)
    return f"""{base_prompt}

Validate your response against these criteria:
{criteria_text}"""


def plan_prompt(request: str) -> str:
    return f"""
Break down this user request into specific tasks for our AI team:
- architect: System design and architecture decisions
- implementer: Code implementation and technical details
- reviewer: Code quality, optimization, and best practices
- designer: UI/UX design, styling, and user experience
- coordinator: Task management and integration

User Request: {request}

Respond with JSON only, in this format:
{{
    "overview": "one paragraph summary of the plan",
    "complexity": "simple | medium | complex",
    "tasks": [
        {{
            "id": "short unique id, e.g. t1",
            "title": "task title",
            "description": "what the worker has to do",
            "role": "architect | implementer | reviewer | designer | coordinator",
            "priority": "high | medium | low",
            "dependencies": ["ids of tasks that must finish first"]
        }}
    ]
}}

Dependencies must only reference ids from the same list and must not form a cycle.
"""


def architecture_prompt(request: str, context: Optional[str] = None) -> str:
    body = f"""
Design the high-level system architecture for this request.

Focus on:
- Component structure and hierarchy
- Data flow and state management
- Technology choices and patterns
- Integration points and dependencies

{f"Context: {context}" if context else ""}
User Request: {request}
"""
    return with_steps(body, [
        "ANALYZE the user request and identify core requirements",
        "DECOMPOSE the problem into system components",
        "DESIGN the architecture with clear rationale",
        "VALIDATE the design against requirements",
    ])


def implementation_prompt(specification: str, architecture: str) -> str:
    body = f"""
Implement the code based on the specification and architecture.

Architecture: {architecture}
Specification: {specification}

Generate clean, modern React/TypeScript code for a Vite project.

Respond with JSON only, in this format:
{{
    "files": [{{"path": "src/App.tsx", "content": "...", "type": "component | page | utility | style | config"}}],
    "dependencies": ["npm package names"],
    "instructions": "how to run the result",
    "reasoning": "why the code is structured this way",
    "stepByStepAnalysis": {{
        "problemAnalysis": "...",
        "solutionDesign": "...",
        "implementationPlan": "...",
        "considerations": ["..."]
    }}
}}
"""
    return with_validation(body, [
        "Code is production-ready and well-structured",
        "Follows React and TypeScript best practices",
        "Includes proper error handling and type safety",
        "Meets all specified requirements",
    ])


def review_prompt(code: str, context: str) -> str:
    body = f"""
Review this code systematically.

Review criteria:
- Code quality and best practices
- Performance optimizations
- Security considerations
- Accessibility improvements
- Error handling and type safety

Context: {context}
Code to review: {code}
"""
    return with_steps(body, [
        "ANALYZE the code structure and patterns",
        "IDENTIFY potential issues and improvements",
        "PRIORITIZE feedback by impact and severity",
        "RECOMMEND specific actionable improvements",
    ])


def design_prompt(requirements: str, request: str) -> str:
    return f"""
Create UI/UX design specifications for this request.

Requirements: {requirements}
User Request: {request}

Focus on:
- Visual design and layout
- User experience and interaction patterns
- Responsive design and accessibility
- Color scheme and typography
"""
