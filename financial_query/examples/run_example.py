#!/usr/bin/env python3
"""
Example: Financial Query Pipeline Demo.

Builds a small project dataset in memory, prints its headline metrics and
answers a handful of free-text questions.

Run from the project root (after ``pip install -e .``):
    python -m financial_query.examples.run_example
"""

from __future__ import annotations

import json
import logging

from financial_query.config import PipelineConfig
from financial_query.dataset_builder import DatasetBuilder
from financial_query.pipeline import FinancialQueryPipeline
from financial_query.schema import Dataset


PROJECT = "1234 - Harbour Tower"

SAMPLE_CSV = """\
Year,Month,Sheet_Name,Financial_Type,Item_Code,Data_Type,Value
2025,3,Financial Status,General,0,Start Date,2023-01-15
2025,3,Financial Status,General,0,Complete Date,Nil
2025,3,Financial Status,General,0,Target Complete Date,2026-06-30
2025,3,Financial Status,General,0,Time Consumed (%),64%
2025,3,Financial Status,General,0,Target Completed (%),58%
2025,3,Financial Status,Business Plan,1,Income,"1,500"
2025,3,Financial Status,Business Plan,3,Gross Profit,100
2025,3,Financial Status,Projection as at,1,Income,"1,650"
2025,3,Financial Status,Projection as at,3,Gross Profit,250
2025,3,Financial Status,Audit Report (WIP),3,Gross Profit,180
2025,3,Financial Status,Cash Flow Actual received & paid as at,3,Gross Profit,(40)
2025,3,Projection,Projection,2.1,Preliminaries,120
2025,3,Projection,Projection,2.3,Plant and Machinery,75
2025,3,Projection,Projection,2.3.1,Plant and Machinery (hired),25
2025,3,Committed Cost,Committed Cost,2.3,Plant and Machinery,60
2025,3,Accrual,Accrual,2.3,Plant and Machinery,55
2025,3,Cash Flow,Cash Flow,2.3,Plant and Machinery,50
2025,2,Cash Flow,Cash Flow,2.3,Plant and Machinery,48
"""


# ======================================================================
# Helper
# ======================================================================

def print_section(title: str) -> None:
    width = 72
    print("\n" + "=" * width)
    print(f"  {title}")
    print("=" * width)


def build_dataset() -> Dataset:
    records = DatasetBuilder().read_csv(SAMPLE_CSV, PROJECT)
    return Dataset(project=PROJECT, records=tuple(records))


# ======================================================================
# Demo 1: Headline metrics
# ======================================================================

def demo_metrics(pipeline: FinancialQueryPipeline, dataset: Dataset) -> None:
    print_section("DEMO 1 — Project Metrics")
    metrics = pipeline.metrics(dataset)
    print(json.dumps(metrics.to_dict(), indent=2, ensure_ascii=False))


# ======================================================================
# Demo 2: Questions
# ======================================================================

QUESTIONS = [
    "what is the projected gp",
    "wip gp for march 2025",
    "monthly plant for march",
    "cashflow 2/25",
    "what was the dividend in 1999",
]


def demo_questions(pipeline: FinancialQueryPipeline, dataset: Dataset) -> None:
    print_section("DEMO 2 — Free-text Questions")
    for question in QUESTIONS:
        answer = pipeline.answer(dataset, question, default_month="3")
        print(f"\n>>> {question}")
        print(f"    status={answer.status}  candidates={len(answer.candidates)}")
        print(answer.text)


# ======================================================================
# Main
# ======================================================================

def main() -> None:
    config = PipelineConfig(log_level=logging.WARNING)  # Quieter for demo output
    pipeline = FinancialQueryPipeline(config)
    dataset = build_dataset()

    demo_metrics(pipeline, dataset)
    demo_questions(pipeline, dataset)

    print("\n" + "=" * 72)
    print("  All demos complete.")
    print("=" * 72)


if __name__ == "__main__":
    main()
