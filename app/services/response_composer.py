"""
Response Composer - canned replies per category, first-time vs. repeat-aware
"""
from dataclasses import dataclass
from typing import Dict, Optional
from app.services.conversation_state import Category


@dataclass(frozen=True)
class ReplyTemplate:
    text: str
    suggests_handoff: bool = False


@dataclass(frozen=True)
class ComposedReply:
    text: str
    suggests_handoff: bool = False


# Replies that already address the user's earlier question; never prefixed with a name
ACKNOWLEDGEMENT_PHRASES = ("I notice", "You mentioned")

# category -> (first time, repeat)
REPLY_TEMPLATES: Dict[Category, tuple] = {
    Category.GREETING: (
        ReplyTemplate(
            "Hello! Welcome to Graduin. I'm here to help you with anything related to our university "
            "application platform, course finder, student accommodation, and more. What would you like "
            "assistance with today?"
        ),
        ReplyTemplate(
            "I see you're greeting me again! Is there something specific I can help you with regarding "
            "your university journey or Graduin's services?"
        ),
    ),
    Category.CONTACT_REQUEST: (
        ReplyTemplate(
            "I'd be happy to connect you with our support team for further assistance. Please use the "
            "contact button below to reach out to our support team directly.",
            suggests_handoff=True,
        ),
        ReplyTemplate(
            "You mentioned wanting to speak with our support team earlier. Would you like me to connect "
            "you with personalized assistance right now?",
            suggests_handoff=True,
        ),
    ),
    Category.INSTITUTION: (
        ReplyTemplate(
            "Graduin partners with over 50+ South African institutions including traditional universities, "
            "universities of technology, and private institutions. You can browse all available institutions "
            "on our Institutions page, where you can apply to multiple universities with a single application. "
            "Would you like help finding specific institutions or courses?"
        ),
        ReplyTemplate(
            "I notice you're asking about universities again. Are you looking for something more specific? "
            "We have partnerships with 20 traditional universities, 6 universities of technology, and 25 "
            "private institutions. Would you like personalized guidance to find the right fit for you?"
        ),
    ),
    Category.COURSE: (
        ReplyTemplate(
            "Our Course Finder helps you discover the perfect program for your interests and career goals. "
            "We offer courses across various fields including Engineering, Business, Health Sciences, "
            "Information Technology, Arts, and more. You can also take our Career Assessment to get "
            "personalized course recommendations. Would you like me to guide you to the Course Finder?"
        ),
        ReplyTemplate(
            "You're still exploring course options? That's great! Would you benefit from personalized course "
            "recommendations based on your interests and career goals? I can connect you with our support "
            "team for tailored guidance.",
            suggests_handoff=True,
        ),
    ),
    Category.ACCOMMODATION: (
        ReplyTemplate(
            "Graduin offers a comprehensive accommodation marketplace with properties across South Africa. "
            "We have student residences, shared accommodation, and private rentals near major universities. "
            "You can search by location, price range, and amenities. Our accommodation page has detailed "
            "listings with photos, prices, and contact information. Need help finding accommodation in a "
            "specific area?"
        ),
        ReplyTemplate(
            "Still searching for the perfect accommodation? Our team can provide personalized assistance to "
            "help you find housing that meets your specific needs and budget. Would you like me to connect "
            "you with our accommodation specialists?",
            suggests_handoff=True,
        ),
    ),
    Category.APPLICATION: (
        ReplyTemplate(
            "With Graduin, you can apply to multiple universities and institutions with just one application! "
            "Our platform streamlines the entire process - simply fill out your information once, select your "
            "preferred institutions, and submit. You can track your applications and receive updates directly "
            "through our platform. Would you like help starting an application?"
        ),
        ReplyTemplate(
            "I see you're still interested in the application process. Would you like step-by-step guidance "
            "tailored to your specific situation? Our support team can provide personalized assistance with "
            "your applications.",
            suggests_handoff=True,
        ),
    ),
    Category.CAREER: (
        ReplyTemplate(
            "Our Career Assessment Test helps you discover your ideal career path and study recommendations "
            "based on your interests, strengths, and goals. The assessment analyzes your preferences and "
            "provides personalized suggestions for courses and institutions. You can access this free tool "
            "from our Course Finder page. Would you like to take the assessment?"
        ),
        ReplyTemplate(
            "Considering the career assessment again? It's a valuable tool! Would you like personalized "
            "career guidance from our team to complement the assessment results?"
        ),
    ),
    Category.PRICING: (
        ReplyTemplate(
            "Application fees vary by institution, ranging from free applications to around R440. Many "
            "institutions offer affordable options, and we provide detailed pricing information for each "
            "institution. For accommodation, prices typically range from R2,500 to R12,000+ per month "
            "depending on location and amenities. You can filter by price range on both our Institutions "
            "and Accommodation pages."
        ),
        ReplyTemplate(
            "Cost is definitely an important factor in your decision. Would you like personalized financial "
            "guidance and information about funding options available to you?"
        ),
    ),
    Category.LOCATION: (
        ReplyTemplate(
            "Graduin covers institutions and accommodation across all major South African cities including "
            "Johannesburg, Cape Town, Durban, Pretoria, and more. You can search by specific locations on our "
            "platform. Many of our accommodation listings are strategically located near major universities "
            "for easy access to campus."
        ),
        ReplyTemplate(
            "Looking at locations again? Each city offers unique opportunities. Would you like personalized "
            "advice about which location might be best for your specific field of study and career goals?"
        ),
    ),
    Category.HELP: (
        ReplyTemplate(
            "I can help you with:\n"
            "• Finding and applying to universities\n"
            "• Discovering courses and career paths\n"
            "• Searching for student accommodation\n"
            "• Taking career assessments\n"
            "• Understanding application processes\n"
            "• General information about Graduin's services\n"
            "\n"
            "What specific area would you like help with?"
        ),
        ReplyTemplate(
            "I'm here to help! Since you're asking again, would you prefer to speak with one of our human "
            "specialists who can provide more detailed, personalized assistance?",
            suggests_handoff=True,
        ),
    ),
    Category.FALLBACK: (
        ReplyTemplate(
            "I'm here to help with Graduin's services including university applications, course selection, "
            "student accommodation, and career guidance. For more specialized assistance beyond what I can "
            "provide, would you like me to connect you with our support team?",
            suggests_handoff=True,
        ),
        ReplyTemplate(
            "I notice you're asking about this again. Would you like me to connect you with our support team "
            "for more personalized assistance? They can provide detailed guidance tailored to your specific "
            "needs.",
            suggests_handoff=True,
        ),
    ),
}


def select_template(category: Category, is_repeat: bool) -> ReplyTemplate:
    first_time, repeat = REPLY_TEMPLATES[category]
    return repeat if is_repeat else first_time


def should_address_by_name(text: str, name: str) -> bool:
    if name in text:
        return False
    return not any(phrase in text for phrase in ACKNOWLEDGEMENT_PHRASES)


def compose(category: Category, is_repeat: bool, known_name: Optional[str] = None) -> ComposedReply:
    """
    Build the assistant reply for one turn.

    The template is picked by the repeat flag; a known name is prefixed as
    "<name>, " unless the reply already names the user or acknowledges the
    earlier question ("I notice ...", "You mentioned ...").
    """
    template = select_template(category, is_repeat)
    text = template.text
    if known_name and should_address_by_name(text, known_name):
        text = f"{known_name}, {text}"
    return ComposedReply(text=text, suggests_handoff=template.suggests_handoff)
