"""The five persuasion personas and their canned, template-filled responses."""

import random

from agents.base import AgentContext, BaseAgent

AGENT_ORDER = ("logic", "emotion", "creative", "authority", "social")

# Keys used in a persisted session's ai_responses mapping
RESPONSE_KEYS = {
    "logic": "logic_agent",
    "emotion": "emotion_agent",
    "creative": "creative_agent",
    "authority": "authority_agent",
    "social": "social_proof_agent",
}

FALLBACK_RESPONSE = "Generic response for this agent type."

TEMPLATES = {
    "logic": [
        "Based on data analysis for {business_context}, targeting {audience} requires a strategic approach. "
        "Key metrics show that {audience_context_lower} respond best to clear value propositions with measurable "
        "benefits. I recommend focusing on ROI-driven messaging that demonstrates concrete outcomes.",
        "From a logical standpoint, {business} should leverage industry benchmarks to position against competitors. "
        "The target demographic of {audience} typically evaluates decisions based on cost-benefit analysis and "
        "proven results.",
        "Statistical evidence suggests that {audience_context_lower} have specific pain points that "
        "{business_context} can address. The optimal approach involves presenting data-backed solutions with clear "
        "implementation timelines.",
    ],
    "emotion": [
        "The emotional connection with {audience} is crucial for {business}. {audience_context} often feel "
        "overwhelmed by choices - we need to create messaging that provides comfort and confidence. Focus on peace "
        "of mind, security, and the feeling of making the right decision.",
        "For {business_context}, the emotional trigger points with {audience} center around trust and reliability. "
        "These customers want to feel valued and understood. Our messaging should emphasize personal attention and "
        "genuine care for their success.",
        "The emotional journey for {audience_context_lower} involves moving from uncertainty to confidence. "
        "{business} should position itself as the trusted guide who understands their challenges and provides "
        "reassuring solutions.",
    ],
    "creative": [
        "Here's an innovative approach for {business}: Create a unique customer experience that sets you apart in "
        "the {category} space. For {audience}, consider developing interactive tools or personalized consultations "
        "that make the decision process engaging and memorable.",
        "Creative positioning for {business_context} could involve storytelling that resonates with "
        "{audience_context_lower}. Think about creating case studies that feel like success stories rather than "
        "sales pitches - showing transformation and positive outcomes.",
        "An out-of-the-box idea: {business} could develop a signature methodology or framework that becomes "
        "synonymous with your brand. This gives {audience} something tangible to remember and share with others.",
    ],
    "authority": [
        "{business} needs to establish thought leadership in the {category} sector. For {audience}, credibility "
        "comes from demonstrated expertise and industry recognition. Showcase certifications, awards, and expert "
        "endorsements prominently.",
        "Authority positioning for {business_context} should emphasize years of experience and successful track "
        "record. {audience_context} trust providers who have proven themselves with similar customers and can "
        "provide references and testimonials.",
        "To build authority with {audience}, {business} should share industry insights and educational content. "
        "Position yourself as the go-to expert who not only provides services but also educates and guides "
        "customers toward informed decisions.",
    ],
    "social": [
        "Social proof is powerful for {audience} when considering {business}. {audience_context} are heavily "
        "influenced by peer recommendations and community validation. Leverage customer testimonials, case "
        "studies, and user-generated content to build trust.",
        "For {business_context}, community building around your brand creates strong social validation. "
        "{audience} want to see that others like them have chosen and succeeded with your services. Create "
        "opportunities for customers to share their experiences.",
        "The social aspect for {audience_context_lower} involves belonging to a community of smart "
        "decision-makers. {business} should foster a sense of exclusivity and insider knowledge that makes "
        "customers feel part of something special.",
    ],
}


class TemplateAgent(BaseAgent):
    """Persona that answers by filling one of its canned templates, picked at random."""

    def __init__(self, key: str, name: str, provider: str, description: str, rng: random.Random | None = None):
        super().__init__(key=key, name=name, provider=provider, description=description)
        self.templates = TEMPLATES.get(key, [FALLBACK_RESPONSE])
        self.rng = rng or random.Random()

    def respond(self, context: AgentContext) -> str:
        template = self.rng.choice(self.templates)
        return template.format(**context.template_fields())


def build_personas(rng: random.Random | None = None) -> dict[str, TemplateAgent]:
    """All five personas in speaking order, sharing one random source."""
    rng = rng or random.Random()
    return {
        "logic": TemplateAgent(
            "logic", "Logic Agent", "OpenAI GPT-4",
            "Analytical reasoning and data-driven insights", rng,
        ),
        "emotion": TemplateAgent(
            "emotion", "Emotion Agent", "OpenAI GPT-4",
            "Emotional intelligence and persuasive messaging", rng,
        ),
        "creative": TemplateAgent(
            "creative", "Creative Agent", "Google Gemini",
            "Innovative ideas and creative solutions", rng,
        ),
        "authority": TemplateAgent(
            "authority", "Authority Agent", "Google Gemini",
            "Credibility and expert positioning", rng,
        ),
        "social": TemplateAgent(
            "social", "Social Proof Agent", "Claude (Anthropic)",
            "Social validation and community building", rng,
        ),
    }


def generate_all(context: AgentContext, rng: random.Random | None = None) -> dict[str, str]:
    """One response per persona, keyed the way persisted sessions store them."""
    personas = build_personas(rng)
    return {RESPONSE_KEYS[key]: personas[key].respond(context) for key in AGENT_ORDER}
