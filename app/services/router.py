"""
Intent Router for the Graduin assistant
Rule-based: an ordered table of (predicate, category) pairs, first match wins
"""
from typing import Callable, Iterable, List, Tuple
from app.services.conversation_state import Category


Predicate = Callable[[str], bool]

GREETING_KEYWORDS = ("hello", "hi", "hey", "good morning", "good afternoon", "good evening", "greetings")
CONTACT_KEYWORDS = (
    "contact support",
    "speak to someone",
    "human help",
    "customer service",
    "support team",
    "help me contact",
    "talk to agent",
    "live chat",
    "personal assistance",
)
INSTITUTION_KEYWORDS = ("university", "institution", "college")
COURSE_KEYWORDS = ("course", "program", "study", "degree")
ACCOMMODATION_KEYWORDS = ("accommodation", "housing", "residence", "room")
APPLICATION_KEYWORDS = ("apply", "application", "admission")
CAREER_KEYWORDS = ("career", "assessment", "test", "guidance")
PRICING_KEYWORDS = ("price", "cost", "fee", "money")
CITY_NAMES = ("johannesburg", "cape town", "durban", "pretoria")
LOCATION_KEYWORDS = CITY_NAMES + ("location",)
HELP_KEYWORDS = ("help", "how", "what")


def contains_any(keywords: Iterable[str]) -> Predicate:
    """Case-insensitive substring test against the whole input (no tokenization)"""
    keywords = tuple(k.lower() for k in keywords)

    def predicate(text: str) -> bool:
        lowered = text.lower()
        return any(keyword in lowered for keyword in keywords)

    return predicate


# Priority order matters: "hi, what is the course fee" is a greeting
INTENT_RULES: List[Tuple[Predicate, Category]] = [
    (contains_any(GREETING_KEYWORDS), Category.GREETING),
    (contains_any(CONTACT_KEYWORDS), Category.CONTACT_REQUEST),
    (contains_any(INSTITUTION_KEYWORDS), Category.INSTITUTION),
    (contains_any(COURSE_KEYWORDS), Category.COURSE),
    (contains_any(ACCOMMODATION_KEYWORDS), Category.ACCOMMODATION),
    (contains_any(APPLICATION_KEYWORDS), Category.APPLICATION),
    (contains_any(CAREER_KEYWORDS), Category.CAREER),
    (contains_any(PRICING_KEYWORDS), Category.PRICING),
    (contains_any(LOCATION_KEYWORDS), Category.LOCATION),
    (contains_any(HELP_KEYWORDS), Category.HELP),
]


class IntentRouter:
    """Classify raw user text into exactly one Category"""

    def __init__(self, rules: List[Tuple[Predicate, Category]] = None):
        self.rules = list(INTENT_RULES if rules is None else rules)

    def classify(self, raw_input: str) -> Category:
        text = raw_input or ""
        for predicate, category in self.rules:
            if predicate(text):
                return category
        return Category.FALLBACK
