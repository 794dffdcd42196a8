"""
Language helpers for bilingual (English / Egyptian Arabic) support.
Detects script, normalizes text and expands Arabic query words into
English and cross-dialect synonyms before scoring.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Set

# Arabic, Arabic Supplement, Arabic Extended-A and both presentation-form blocks
ARABIC_RE = re.compile(
    "[\u0600-\u06FF\u0750-\u077F\u08A0-\u08FF\uFB50-\uFDFF\uFE70-\uFEFF]"
)

# Harakat, superscript alef and tatweel
DIACRITICS_RE = re.compile("[\u064B-\u0652\u0670\u0640]")

WHITESPACE_RE = re.compile(r"\s+")


# ── Keyword Dictionary ─────────────────────────────────────────────────────

ARABIC_KEYWORD_MAPPINGS: Dict[str, List[str]] = {
    # Pricing & costs
    "أسعار": ["price", "pricing", "cost", "fee", "rates"],
    "اسعار": ["price", "pricing", "cost", "fee", "أسعار"],
    "سعر": ["price", "cost", "أسعار"],
    "تكلفة": ["cost", "price", "expense", "fee"],
    "رسوم": ["fees", "charges", "cost", "price"],
    "مجاني": ["free", "complimentary", "no-cost"],
    "بكام": ["price", "cost", "how much", "أسعار"],
    "كام": ["how much", "price", "cost"],
    "فلوس": ["money", "price", "cost", "payment"],
    "دفع": ["payment", "pay", "installments"],

    # Courses & training
    "دورات": ["course", "courses", "training", "bootcamp", "program"],
    "الدورات": ["course", "courses", "training", "bootcamp", "program"],
    "كورسات": ["course", "courses", "training", "bootcamp"],
    "كورس": ["course", "training", "bootcamp", "دورات"],
    "تدريب": ["training", "course", "courses", "bootcamp", "workshop"],
    "التدريبية": ["training", "course", "courses", "bootcamp"],
    "برامج": ["program", "programs", "courses", "training"],
    "شهادة": ["certificate", "certification", "diploma"],
    "تسجيل": ["registration", "register", "enroll", "enrollment"],

    # Services & products
    "خدمات": ["service", "services", "consulting", "support"],
    "منتجات": ["product", "products", "software", "solution"],
    "حلول": ["solution", "solutions", "services"],
    "استشارات": ["consulting", "consultation", "advisory"],
    "دعم": ["support", "help", "maintenance"],
    "برمجة": ["development", "programming", "software"],

    # Contact & communication
    "اتصال": ["contact", "contacts", "phone", "call"],
    "تواصل": ["contact", "communication", "reach"],
    "هاتف": ["phone", "telephone", "number"],
    "تليفون": ["phone", "telephone", "number", "هاتف"],
    "رقم": ["number", "phone"],
    "إيميل": ["email", "mail", "contact"],
    "ايميل": ["email", "mail", "contact"],
    "عنوان": ["address", "location", "office"],
    "موقع": ["location", "address", "site", "office"],
    "فين": ["where", "location", "address", "أين"],

    # Policies & information
    "سياسات": ["policy", "policies", "terms", "conditions"],
    "سياسة": ["policy", "policies", "terms"],
    "قوانين": ["rules", "policies", "regulations", "terms"],
    "شروط": ["terms", "conditions", "requirements"],
    "استرجاع": ["refund", "return", "policy"],
    "إلغاء": ["cancellation", "cancel", "policy"],

    # Questions & FAQ
    "أسئلة": ["faq", "faqs", "question", "questions", "ask"],
    "استفسار": ["inquiry", "question", "ask", "faq"],
    "سؤال": ["question", "ask", "inquiry"],

    # Company information
    "شركة": ["company", "overview", "about", "organization"],
    "الشركة": ["company", "overview", "about", "organization"],
    "مؤسسة": ["company", "organization", "institution"],
    "فريق": ["team", "employees", "staff", "personnel"],
    "موظفين": ["employees", "staff", "team", "workers"],

    # Time & duration
    "وقت": ["time", "duration", "schedule"],
    "مدة": ["duration", "time", "period"],
    "جدول": ["schedule", "timetable", "calendar"],
    "موعد": ["appointment", "schedule", "time"],
    "مواعيد": ["hours", "schedule", "appointment", "time"],

    # General terms and interrogatives
    "معلومات": ["information", "details", "data"],
    "تفاصيل": ["details", "information", "specifics"],
    "كيف": ["how", "method", "way"],
    "ماذا": ["what", "which"],
    "متى": ["when", "time", "schedule"],
    "أين": ["where", "location", "place"],

    # Egyptian colloquial forms
    "ايه": ["what", "which", "ماذا"],
    "إيه": ["what", "which", "ماذا"],
    "ازاي": ["how", "method", "way", "كيف"],
    "إزاي": ["how", "method", "way", "كيف"],
    "امتى": ["when", "time", "schedule", "متى"],
    "إمتى": ["when", "time", "schedule", "متى"],
    "مين": ["who", "team", "about"],
    "ليه": ["why", "reason"],
    "عايز": ["want", "need", "أريد"],
    "عاوز": ["want", "need", "أريد"],
}


@dataclass
class KeywordSet:
    """Tokens extracted from one query, before and after expansion."""
    original: List[str]
    expanded: Set[str] = field(default_factory=set)
    language: str = "en"


# ── Detection & Normalization ──────────────────────────────────────────────

def is_arabic(text) -> bool:
    """True if the text contains at least one Arabic-script character."""
    if not text or not isinstance(text, str):
        return False
    return ARABIC_RE.search(text) is not None


def detect_language(text) -> str:
    """Return "ar" for Arabic-script text, otherwise "en"."""
    return "ar" if is_arabic(text) else "en"


def normalize_text(text) -> str:
    """Lowercase, trim, strip Arabic diacritics/tatweel and collapse whitespace."""
    if not text or not isinstance(text, str):
        return ""
    text = DIACRITICS_RE.sub("", text.lower())
    return WHITESPACE_RE.sub(" ", text).strip()


# ── Keyword Extraction ─────────────────────────────────────────────────────

def expand_arabic_keywords(words: Iterable[str]) -> List[str]:
    """
    Add the dictionary synonyms of every word that is a mapping key.
    Single hop: synonyms are not expanded again. Order is preserved.
    """
    words = list(words)
    expanded = list(dict.fromkeys(words))
    seen = set(expanded)

    for word in words:
        for synonym in ARABIC_KEYWORD_MAPPINGS.get(word, ()):
            if synonym not in seen:
                expanded.append(synonym)
                seen.add(synonym)

    return expanded


def extract_keywords(query) -> KeywordSet:
    """Tokenize a query and expand its Arabic words into synonyms."""
    normalized = normalize_text(query)
    words = [w for w in normalized.split(" ") if len(w) > 1]

    return KeywordSet(
        original=words,
        expanded=set(expand_arabic_keywords(words)),
        language=detect_language(query),
    )
