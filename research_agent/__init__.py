"""Technology Research Agent.

Runs a four-phase research workflow against Claude:
- Market research
- Vendor ecosystem analysis
- Hype cycle positioning
- Strategic summary

and packages the results as downloadable artifacts (executive summary PDF,
hype cycle chart, vendor landscape chart, raw analysis JSON).
"""

__version__ = "0.1.0"
