import argparse
import sys
from pathlib import Path

from ai_scientist.agents.assistant_client import AssistantClient
from ai_scientist.agents.chat_agent import ChatAgent
from ai_scientist.agents.data_agent import parse_csv
from ai_scientist.config import get_config
from ai_scientist.pipeline import analyze
from ai_scientist.utils.logging_config import setup_logging


def main():
    """Main entry point for the readiness analysis"""
    parser = argparse.ArgumentParser(description="Autonomous AI Scientist")
    parser.add_argument("--data-path", required=True, help="Path to the CSV dataset")
    parser.add_argument("--target-column", required=True, help="Name of the target column")
    parser.add_argument("--question", action="append", default=[], help="Question to ask about the data (repeatable)")
    parser.add_argument("--use-assistant", action="store_true", help="Hand unanswered questions to the text-generation service")
    parser.add_argument("--output", help="Write the report as JSON to this path")
    parser.add_argument("--config", help="Path to configuration file")
    parser.add_argument("--log-level", default=None, help="Logging level")

    args = parser.parse_args()

    config = get_config(args.config)
    setup_logging(log_level=args.log_level or config.logging_level, log_dir=str(config.paths.LOGS_DIR))

    for issue in config.validate_config():
        print(f"Warning: {issue}")

    data_path = Path(args.data_path)
    if not data_path.exists():
        print(f"Error: Data file not found at {args.data_path}")
        sys.exit(1)

    headers, rows = parse_csv(data_path.read_text(encoding="utf-8"))
    if not headers:
        print(f"Error: {args.data_path} is empty")
        sys.exit(1)

    report = analyze(headers, rows, args.target_column, config)
    quality = report.data_quality

    print(f"Verdict: {quality.verdict}")
    for reason in quality.reasons:
        print(f"  - {reason}")

    if report.automation_status == "Stopped":
        print("❌ Analysis stopped at the quality gate")
    else:
        print("🎉 Analysis completed successfully!")
        print(f"Champion model: {report.final_model.name}")
        print(f"Trust score: {report.trust_score.total}/100 ({report.risk_level} risk)")
        print(f"Recommendation: {report.deployment_recommendation}")
        print(report.summary)

    if args.output:
        Path(args.output).write_text(report.model_dump_json(by_alias=True, exclude_none=True, indent=2), encoding="utf-8")
        print(f"Report written to {args.output}")

    if args.question:
        agent = ChatAgent(AssistantClient(config.assistant) if args.use_assistant else None)
        for question in args.question:
            exchange = agent.respond(question, report, headers, rows, use_assistant=args.use_assistant)
            print(f"\nQ: {question}\nA: {exchange.answer}")
            if exchange.chart is not None:
                print(f"   [{exchange.chart.type} chart] {exchange.chart.title}: {len(exchange.chart.data)} points")

    sys.exit(1 if report.automation_status == "Stopped" else 0)


if __name__ == "__main__":
    main()
