"""
Prompt Templates

System prompts, question-type guidance and the builders that turn
session state into the prompts sent to the LLM text service.
"""

from typing import List, Optional

SOCRATIC_SYSTEM_PROMPT = """You are a Socratic reasoning assistant designed to foster critical thinking through guided questioning.

Your core principles:
1. NEVER provide direct answers. Always ask clarifying questions instead.
2. Guide learners to discover answers themselves through structured questioning.
3. Challenge assumptions gently and encourage deeper thinking.
4. Build on previous responses to progressively deepen understanding.
5. Adapt questioning based on comprehension level and confidence.
6. Focus on "why" and "how" rather than "what".

Questioning hierarchy:
- Level 1: Clarifying questions - "What do you mean by...?"
- Level 2: Probing questions - "Why do you think that?"
- Level 3: Connecting questions - "How does this relate to...?"
- Level 4: Challenge questions - "What if...?"
- Level 5: Assumption questions - "Are you assuming...?"

Always maintain a supportive, curious, and encouraging tone. Your goal is to help learners think deeply, not to test them."""

# Ordered: selection by depth saturates at the last entry
QUESTION_TYPES = ["feynman", "edgeCase", "assumption", "doubleDown", "counterExemplar", "reflectiveToss"]

QUESTION_TYPE_GUIDANCE = {
    "feynman": "Ask them to explain the concept in simple terms as if teaching a child. Test their ability to simplify.",
    "edgeCase": "Present a boundary condition or extreme case. Test how they handle edge cases.",
    "assumption": "Uncover hidden assumptions. Ask what they're assuming to be true.",
    "doubleDown": "Ask them to synthesize - how do different concepts connect?",
    "counterExemplar": "Present a specific counter-example to their reasoning.",
    "reflectiveToss": "Turn their question back - what would they need to understand first?",
}

SCAFFOLD_DIRECTIVES = {
    "nudge": "The learner is unsure. Include a gentle nudge that points at what to reconsider, without hinting at the answer.",
    "hint": "The learner is struggling. Include a concrete hint about which idea to connect next.",
    "partial_explanation": "The learner is stuck. Briefly explain the first part of the idea, then ask about the rest.",
}

CALIBRATION_SCORING_SYSTEM_PROMPT = "You are an educational evaluator. Return only valid JSON."

HISTORY_WINDOW = 6


def select_question_type(depth: int) -> str:
    """Question type for a depth (1-based); clamps at the last type."""
    index = min(max(depth - 1, 0), len(QUESTION_TYPES) - 1)
    return QUESTION_TYPES[index]


def format_recent_conversation(state, window: int = HISTORY_WINDOW) -> str:
    return "\n\n".join(
        f"{'Learner' if turn.role == 'user' else 'AI'}: {turn.text}"
        for turn in state.conversation_history[-window:]
    )


def build_initial_question_prompt(topic: str, baseline_level: Optional[str] = None) -> str:
    level = baseline_level or "intermediate"
    return f"""Create an initial Socratic question for exploring: "{topic}"

Requirements:
1. Open-ended (not yes/no)
2. Suited to a learner at {level} level
3. Curious and welcoming tone
4. Hints at deeper complexity
5. One clear question only

Just the question, nothing else."""


def build_next_question_system_prompt(question_type: str) -> str:
    return SOCRATIC_SYSTEM_PROMPT + "\n\nFor this response: " + QUESTION_TYPE_GUIDANCE[question_type]


def build_next_question_prompt(
    state,
    answer: str,
    question_type: str,
    contradiction_detected: bool = False,
    loop_warning: Optional[str] = None,
    scaffold_directive: Optional[str] = None,
    regression_directive: Optional[str] = None,
) -> str:
    """User prompt for the next Socratic question."""
    step = state.current_step_info
    step_line = f"{step.name} (step {step.index + 1} of {len(state.curriculum_path)}): {step.description}" if step else "n/a"

    prompt = f"""Topic: "{state.topic}"
Learner baseline level: {state.baseline_level or "unknown"}
Curriculum step: {step_line}
Depth: Question {state.question_depth}
Question style: {question_type} - {QUESTION_TYPE_GUIDANCE[question_type]}

Recent conversation:
{format_recent_conversation(state)}

Their latest response: "{answer}"
"""

    notes = []
    if contradiction_detected:
        notes.append("Their latest response seems to contradict something they said earlier. Invite them to reconcile the two statements.")
    if loop_warning:
        notes.append(f"{loop_warning}. Vary the angle of the next question.")
    if regression_directive:
        notes.append(regression_directive)
    if scaffold_directive:
        notes.append(scaffold_directive)
    if notes:
        prompt += "\nNotes:\n" + "\n".join(f"- {note}" for note in notes) + "\n"

    prompt += """
Generate the next Socratic question that:
- Builds directly on their answer
- Probes deeper into reasoning
- Is respectful and curious
- Challenges without giving answers
- Is concise (1-2 sentences)

Just the question."""
    return prompt


def build_synthesis_prompt(state) -> str:
    statements = "\n".join(f"- {a.statement}" for a in state.assertions) or "- (none yet)"
    return f"""Topic: "{state.topic}"

The learner has established these statements:
{statements}

Ask ONE synthesis question that asks them to write a short memo connecting these ideas into a coherent explanation of the topic.

Just the question."""


def build_final_question_prompt(state, memo: str, gap_steps: List[str]) -> str:
    gaps = ", ".join(gap_steps) if gap_steps else "none"
    return f"""Topic: "{state.topic}"

The learner wrote this synthesis memo:
"{memo}"

Curriculum areas not yet mastered: {gaps}

Ask ONE final validation question that tests whether their synthesis holds up, focusing on the weakest area.

Just the question."""


def build_confused_questions_prompt(state, count: int) -> str:
    statements = "\n".join(f"- {a.statement}" for a in state.assertions[-5:]) or "- (none yet)"
    return f"""Topic: "{state.topic}"
Learner level: {state.baseline_level or "intermediate"}

What the learner has established so far:
{statements}

Write {count} questions a confused classmate might ask about this topic, which the learner should be able to answer using what they have established.

One question per line, no numbering, nothing else."""


def build_calibration_scoring_prompt(topic: str, response: str) -> str:
    return f"""Evaluate how familiar this learner is with "{topic}" on a scale of 0-1.

Response: {response}

Consider:
1. Correctness (0-1): Is what they say correct or on the right track?
2. Depth (0-1): Does it show understanding beyond surface level?
3. Evidence (0-1): Are there specific examples, explanations, or reasoning?

Calculate: score = (correctness * 0.4) + (depth * 0.3) + (evidence * 0.3)

Return ONLY a JSON object with this exact format:
{{"score": 0.0-1.0, "reasoning": "brief one-sentence explanation"}}

Do not include any other text."""
