"""
Prompt templates for the Support Q&A Bot.
Builds the system/user prompt pair for the model, in English or Egyptian
Arabic, with or without retrieved company context.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from supportbot.language import detect_language
from supportbot.retriever import ScoredChunk

CONTEXT_SEPARATOR = "\n\n---\n\n"

EGYPTIAN_TONE_INSTRUCTIONS = """
When responding in Arabic, use Egyptian dialect and tone with these characteristics:
- Use "إزيك" or "أهلاً وسهلاً" for greetings
- Use "إيه" instead of "ما" for questions
- Use "عايز/عاوز" instead of "أريد"
- Use friendly, conversational tone
- Include common Egyptian expressions like "إن شاء الله", "ربنا يكرمك"
- Be respectful and professional while maintaining warmth
- Use "حضرتك" for formal address
"""

# ── No-context Prompts ────────────────────────────────────────────────────

NO_CONTEXT_PROMPT_EN = """You are an advanced AI assistant for {company_name} in the {company_domain} domain. You are an expert in technology and technical solutions with broad knowledge.

Tasks:
- Answer all questions intelligently and knowledgeably, even if not directly related to the company
- If asked about specific company information you don't have, politely acknowledge this
- For technical or general questions, answer with full expertise and professionalism
- Provide useful and valuable information in every response
- Be clear, concise, and helpful
- Use your general knowledge to provide the best possible answer"""

NO_CONTEXT_PROMPT_AR = """أنت مساعد ذكي متقدم لشركة {company_name} في مجال {company_domain}. أنت خبير في التكنولوجيا والحلول التقنية ولديك معرفة واسعة.
{tone_instructions}
المهام:
- أجب على جميع الأسئلة بذكاء ومعرفة، حتى لو لم تكن متعلقة مباشرة بالشركة
- إذا السؤال عن الشركة وليس عندك معلومات محددة، اعتذر بلطف
- إذا السؤال تقني أو عام، أجب بخبرة واحترافية كاملة
- قدم معلومات مفيدة وقيمة في كل إجابة
- كن واضح ومختصر ومفيد
- استخدم خبرتك العامة لتقديم أفضل إجابة ممكنة"""

# ── Contextual Prompts ────────────────────────────────────────────────────

CONTEXT_PROMPT_EN = """You are an advanced expert AI assistant for {company_name}. You have the following company information and broad knowledge in technology.

COMPANY CONTEXT:
{context}

Instructions:
- Use the provided company information as your primary reference
- If the question needs additional information not in context, use your general knowledge
- If company information is insufficient, say so clearly before supplementing it with general knowledge
- Never invent company facts such as prices, dates or contact details that are not in the context
- Be professional, helpful, and concise
- Always maintain a friendly, professional tone"""

CONTEXT_PROMPT_AR = """أنت مساعد ذكي متقدم وخبير لشركة {company_name}. لديك معلومات الشركة التالية ومعرفة واسعة في التكنولوجيا.

معلومات الشركة:
{context}

تعليمات:
- استخدم معلومات الشركة المقدمة كمرجع أساسي
- إذا السؤال يحتاج معلومات إضافية غير موجودة في السياق، استخدم معرفتك العامة
- إذا معلومات الشركة غير كافية، وضّح ده بصراحة قبل ما تكمل بمعرفتك العامة
- متألفش معلومات عن الشركة زي الأسعار أو المواعيد أو أرقام التواصل لو مش موجودة في السياق
- كن مهنياً ومفيداً ومختصراً
{tone_instructions}"""

ARABIC_USER_PROMPT = """{query}

استخدم المعلومات اللي فوق عشان تجاوب على السؤال ده."""


@dataclass
class PromptBundle:
    """Everything the model call and the response payload need."""
    system_prompt: str
    user_prompt: str
    has_context: bool
    language: str
    sources: List[str] = field(default_factory=list)
    chunk_count: int = 0

    def to_dict(self) -> Dict:
        return {
            "system_prompt": self.system_prompt,
            "user_prompt": self.user_prompt,
            "has_context": self.has_context,
            "language": self.language,
            "sources": list(self.sources),
            "chunk_count": self.chunk_count,
        }


def build_context(chunks: Sequence[ScoredChunk]) -> str:
    """Label each chunk with its position and source, then join them."""
    return CONTEXT_SEPARATOR.join(
        f"[Document {i} - {c.source}]\n{c.content}"
        for i, c in enumerate(chunks, 1)
    )


def unique_sources(chunks: Sequence[ScoredChunk]) -> List[str]:
    """Distinct chunk sources in first-seen order."""
    return list(dict.fromkeys(c.source for c in chunks))


def build_no_context_prompt(
    is_arabic: bool, company_name: str, company_domain: str
) -> str:
    if is_arabic:
        return NO_CONTEXT_PROMPT_AR.format(
            company_name=company_name,
            company_domain=company_domain,
            tone_instructions=EGYPTIAN_TONE_INSTRUCTIONS,
        )
    return NO_CONTEXT_PROMPT_EN.format(
        company_name=company_name,
        company_domain=company_domain,
    )


def build_context_prompt(context: str, is_arabic: bool, company_name: str) -> str:
    if is_arabic:
        return CONTEXT_PROMPT_AR.format(
            company_name=company_name,
            context=context,
            tone_instructions=EGYPTIAN_TONE_INSTRUCTIONS,
        )
    return CONTEXT_PROMPT_EN.format(company_name=company_name, context=context)


def compose_prompt(
    query: str,
    chunks: Sequence[ScoredChunk],
    company_name: str = "ATG Solutions",
    company_domain: str = "technology consulting",
) -> PromptBundle:
    """
    Build the prompt pair for a query and its retrieved chunks.

    With no chunks the model is told to answer from general knowledge and to
    be honest about missing company details. With chunks it is told to rely
    on the labelled context first.
    """
    language = detect_language(query)
    is_arabic = language == "ar"

    if not chunks:
        return PromptBundle(
            system_prompt=build_no_context_prompt(is_arabic, company_name, company_domain),
            user_prompt=query,
            has_context=False,
            language=language,
        )

    context = build_context(chunks)
    user_prompt = ARABIC_USER_PROMPT.format(query=query) if is_arabic else query

    return PromptBundle(
        system_prompt=build_context_prompt(context, is_arabic, company_name),
        user_prompt=user_prompt,
        has_context=True,
        language=language,
        sources=unique_sources(chunks),
        chunk_count=len(chunks),
    )
