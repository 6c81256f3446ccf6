"""
Financial Query — Free-text Question Engine for Project Financials.

Answers questions such as "what is the projected gp for march" against flat
tables of project line items, without a fixed query grammar.  Shorthand is
expanded, dates and attributes are inferred from the question, filters are
relaxed until something matches, and the best-matching records are ranked
as selectable candidates with an explainable score.
"""

__version__ = "1.0.0"
__author__ = "Financial Query Team"

from financial_query.pipeline import FinancialQueryPipeline  # noqa: F401
