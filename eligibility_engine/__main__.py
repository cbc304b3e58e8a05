# eligibility_engine/__main__.py
"""
Train a model and score one applicant from the command line.

Usage:
    python -m eligibility_engine --income 1200000 --credit-history 0.9 \
        --loan-amount 1000000 --loan-term 240 --employment-type salaried \
        --dependents 1 --marital-status married
"""

import argparse
import json
import sys

from pydantic import ValidationError

from eligibility_engine import settings
from eligibility_engine.model_loader import get_model
from eligibility_engine.predict import predict
from eligibility_engine.schemas import ApplicantForm


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="eligibility_engine",
        description="Train the loan eligibility model and score one applicant.",
    )
    parser.add_argument("--income", type=float, default=1_200_000)
    parser.add_argument("--credit-history", type=float, default=0.9)
    parser.add_argument("--loan-amount", type=float, default=1_000_000)
    parser.add_argument("--loan-term", type=int, default=240)
    parser.add_argument("--employment-type", default="salaried",
                        choices=sorted(settings.EMPLOYMENT_SCORES))
    parser.add_argument("--dependents", type=int, default=1)
    parser.add_argument("--marital-status", default="married",
                        choices=sorted(settings.MARITAL_SCORES))
    parser.add_argument("--log-level", default=None, help="Overrides ELIGIBILITY_LOG_LEVEL")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    settings.configure_logging(args.log_level)

    try:
        form = ApplicantForm(
            income=args.income,
            credit_history=args.credit_history,
            loan_amount=args.loan_amount,
            loan_term=args.loan_term,
            employment_type=args.employment_type,
            dependents=args.dependents,
            marital_status=args.marital_status,
        )
    except ValidationError as e:
        print(f"Invalid application:\n{e}", file=sys.stderr)
        return 2

    model = get_model()
    result = predict(form.to_profile(), model)

    print(json.dumps({
        "model_version": model.version,
        "metrics": model.metrics.to_dict(),
        "prediction": result.to_dict(),
    }, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
