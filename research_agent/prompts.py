"""Prompt builders for the four research phases.

Each builder is a pure function of its inputs: same topic and prior outputs,
same prompt text. Prior phase outputs are embedded verbatim.

Word limits and token budgets are hints to the model. They are passed as
generation parameters (see PHASE_POLICIES) and never used to truncate input.
"""

from dataclasses import dataclass

from jinja2 import BaseLoader, Environment

from research_agent.config import DEFAULT_ORGANIZATION
from research_agent.executor.schemas import PhaseRequest, ResearchPhase


@dataclass(frozen=True)
class PhasePolicy:
    max_output_tokens: int
    temperature: float
    max_words: int


PHASE_POLICIES: dict[ResearchPhase, PhasePolicy] = {
    ResearchPhase.MARKET_RESEARCH: PhasePolicy(max_output_tokens=1200, temperature=0.3, max_words=800),
    ResearchPhase.VENDOR_ANALYSIS: PhasePolicy(max_output_tokens=1000, temperature=0.3, max_words=650),
    ResearchPhase.HYPE_CYCLE: PhasePolicy(max_output_tokens=800, temperature=0.2, max_words=500),
    ResearchPhase.SUMMARY: PhasePolicy(max_output_tokens=1000, temperature=0.2, max_words=650),
}

HYPE_CYCLE_STAGE_NAMES = (
    "Innovation Trigger",
    "Peak of Inflated Expectations",
    "Trough of Disillusionment",
    "Slope of Enlightenment",
    "Plateau of Productivity",
)

_env = Environment(
    loader=BaseLoader(),
    autoescape=False,  # Markdown prompts, not HTML
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=False,
)


MARKET_RESEARCH_TEMPLATE = """You are a senior enterprise technology analyst conducting comprehensive market research.

Technology Area: {{ topic }}

Conduct thorough research and provide a structured analysis covering:

1. **Market Overview**
   - Current market size and growth trajectory
   - Key driving forces and adoption factors
   - Market maturity indicators

2. **Technology Landscape**
   - Core capabilities and use cases
   - Technical architecture patterns
   - Implementation approaches

3. **Adoption Trends**
   - Industry vertical adoption rates
   - Enterprise vs SMB adoption patterns
   - Geographic adoption variations

4. **Key Players Analysis**
   - Leading vendors and their market positions
   - Emerging players and disruptors
   - Technology platform leaders

5. **Business Impact Assessment**
   - ROI and value proposition analysis
   - Risk factors and challenges
   - Strategic advantages

Provide your analysis in a structured format with clear sections and actionable insights. Focus on enterprise architecture implications and strategic decision-making factors.

Keep the entire response under {{ max_words }} words."""


VENDOR_ANALYSIS_TEMPLATE = """You are an enterprise architecture analyst specializing in vendor evaluation and competitive analysis.

Technology Area: {{ topic }}

Market Context:
{{ market_research }}

Provide a comprehensive vendor ecosystem analysis including:

1. **Market Leaders**
   - Top 5-7 established vendors
   - Market share and positioning
   - Strength/weakness analysis

2. **Emerging Players**
   - Innovative startups and challengers
   - Unique value propositions
   - Growth trajectory assessment

3. **Platform Ecosystem**
   - Integration capabilities
   - Partnership networks
   - Developer ecosystem strength

4. **Competitive Dynamics**
   - Competitive positioning map
   - Differentiation strategies
   - Price/value positioning

5. **Vendor Evaluation Framework**
   - Key evaluation criteria
   - Scoring methodology
   - Selection recommendations

Focus on practical enterprise purchasing decisions and strategic vendor partnerships. Consider the 4 P's framework: People, Process, Platform, Price.

Keep the entire response under {{ max_words }} words."""


HYPE_CYCLE_TEMPLATE = """You are a senior technology analyst creating a Gartner-style hype cycle analysis.

Technology Area: {{ topic }}

Market Research Context:
{{ market_research }}

Create a comprehensive hype cycle analysis including:

1. **Current Position Assessment**
   - Where {{ topic }} sits on the hype cycle
   - Justification for this positioning
   - Movement trend analysis

2. **Hype Cycle Phases Analysis**
{% for stage in stages %}
   - {{ stage }}
{% endfor %}

3. **Timeline Projections**
   - Expected time to reach mainstream adoption
   - Key milestones and inflection points
   - Market maturity indicators

4. **Risk and Opportunity Assessment**
   - Implementation risks at current maturity level
   - Strategic opportunities for early/late adopters
   - Timing recommendations for enterprise adoption

5. **Strategic Recommendations**
   - When to evaluate vs implement
   - Pilot project recommendations
   - Strategic positioning advice

Begin the response with a single line stating the current stage, using exactly one of the five stage names above:
Current Position: <stage name>

Provide data-driven insights with clear reasoning for positioning and timing recommendations.

Keep the entire response under {{ max_words }} words."""


SUMMARY_TEMPLATE = """You are an enterprise architect creating an executive-level strategic technology whitepaper.

Technology: {{ topic }}
Organization: {{ organization_name }}

Research Foundation:
Market Research: {{ market_research }}
Vendor Analysis: {{ vendor_analysis }}
Hype Cycle Analysis: {{ hype_cycle }}

Create a strategic whitepaper with the following structure:

**EXECUTIVE SUMMARY**
- Key findings and strategic recommendations
- Business impact assessment
- Implementation timeline recommendations

**1. TECHNOLOGY OVERVIEW**
- Definition and core capabilities
- Business value proposition
- Strategic importance for enterprise architecture

**2. MARKET LANDSCAPE ANALYSIS**
- Market size, growth, and maturity assessment
- Competitive landscape overview
- Industry adoption trends

**3. ENTERPRISE IMPLICATIONS**
- Strategic fit with business objectives
- Architectural considerations
- Integration requirements and challenges

**4. IMPLEMENTATION STRATEGY**
- Phased adoption approach
- Risk mitigation strategies
- Success metrics and KPIs

**5. RECOMMENDATIONS AND NEXT STEPS**
- Strategic recommendations
- Immediate action items
- Long-term roadmap alignment

Format as a professional enterprise document with clear sections, executive-level language, and actionable recommendations. Keep the section headings exactly as written above, in bold.

Keep the entire response under {{ max_words }} words."""


def _render(template: str, phase: ResearchPhase, **context) -> str:
    policy = PHASE_POLICIES[phase]
    return _env.from_string(template).render(max_words=policy.max_words, **context).strip()


def build_market_research_prompt(topic: str) -> str:
    return _render(MARKET_RESEARCH_TEMPLATE, ResearchPhase.MARKET_RESEARCH, topic=topic)


def build_vendor_analysis_prompt(topic: str, market_research_text: str) -> str:
    return _render(
        VENDOR_ANALYSIS_TEMPLATE,
        ResearchPhase.VENDOR_ANALYSIS,
        topic=topic,
        market_research=market_research_text,
    )


def build_hype_cycle_prompt(topic: str, market_research_text: str) -> str:
    """Hype cycle prompt. Uses market research only, never vendor analysis."""
    return _render(
        HYPE_CYCLE_TEMPLATE,
        ResearchPhase.HYPE_CYCLE,
        topic=topic,
        market_research=market_research_text,
        stages=HYPE_CYCLE_STAGE_NAMES,
    )


def build_summary_prompt(
    topic: str,
    organization_name: str,
    market_research_text: str,
    vendor_analysis_text: str,
    hype_cycle_text: str,
) -> str:
    """Strategic summary prompt embedding all three prior outputs.

    A blank organization name falls back to DEFAULT_ORGANIZATION.
    """
    return _render(
        SUMMARY_TEMPLATE,
        ResearchPhase.SUMMARY,
        topic=topic,
        organization_name=(organization_name or "").strip() or DEFAULT_ORGANIZATION,
        market_research=market_research_text,
        vendor_analysis=vendor_analysis_text,
        hype_cycle=hype_cycle_text,
    )


def phase_request(phase: ResearchPhase, prompt_text: str) -> PhaseRequest:
    """Attach the phase's generation policy to a built prompt."""
    policy = PHASE_POLICIES[phase]
    return PhaseRequest(
        prompt_text=prompt_text,
        max_output_tokens=policy.max_output_tokens,
        temperature=policy.temperature,
    )
