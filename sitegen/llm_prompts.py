from __future__ import annotations

from typing import Any, Dict, List, Mapping, NamedTuple, Tuple


SYSTEM_PROMPT = (
    "You are a professional web developer. "
    "Generate complete, production-ready website code based on user requirements."
)

# flag name -> (phrase when on, phrase when off), in render order
FEATURE_PHRASES: List[Tuple[str, Tuple[str, str]]] = [
    ("darkMode", ("Design style: Modern with dark theme", "Design style: Modern with light theme")),
    ("animations", ("Include smooth animations", "No animations needed")),
    ("responsive", ("Fully responsive design", "Desktop-only design")),
    ("forms", ("Include a contact form", "No forms needed")),
    ("seo", ("Include SEO optimization", "No SEO needed")),
]

_OUTPUT_SHAPE_HINT = """Provide the complete code in this JSON format:
{
  "html": "complete HTML code",
  "css": "complete CSS code",
  "js": "complete JavaScript code",
  "backend": "Node.js backend code if forms are enabled",
  "schema": "JSON content schema"
}"""


class ModelInstruction(NamedTuple):
    system_text: str
    user_text: str

    def as_messages(self) -> List[Dict[str, str]]:
        return [
            {"role": "system", "content": self.system_text},
            {"role": "user", "content": self.user_text},
        ]


def _flag(features: Any, name: str) -> bool:
    if features is None:
        return False
    if isinstance(features, Mapping):
        return bool(features.get(name))
    return bool(getattr(features, name, False))


def build_system_prompt() -> str:
    return SYSTEM_PROMPT


def feature_phrases(features: Any) -> List[str]:
    """One phrase per feature flag; absent flags read as off."""
    return [on if _flag(features, name) else off for name, (on, off) in FEATURE_PHRASES]


def build_user_prompt(description: Any, features: Any) -> str:
    description = "" if description is None else str(description)
    requirements = "\n".join(f"- {phrase}" for phrase in feature_phrases(features))
    return (
        f"Generate a complete website based on the following description: {description}.\n"
        "Requirements:\n"
        f"{requirements}\n\n"
        f"{_OUTPUT_SHAPE_HINT}"
    )


def build_instruction(description: Any, features: Any) -> ModelInstruction:
    return ModelInstruction(build_system_prompt(), build_user_prompt(description, features))
