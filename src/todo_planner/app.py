import argparse

from dotenv import load_dotenv

from .config import AppConfig
from .container import build_container
from .utils.logging import setup_logging


def main() -> None:
    load_dotenv()
    parser = argparse.ArgumentParser(description="Plan and run a to-do request with an LLM.")
    parser.add_argument("request", nargs="+", help="User request")
    args = parser.parse_args()

    config = AppConfig.from_env()
    setup_logging(config.log_level)
    container = build_container(config)

    state = container.planner.run(" ".join(args.request))
    print("Plan:")
    for index, step in enumerate(state["plan"].steps, start=1):
        print(f"{index}. {step.function_name} {step.to_json()}")
    if not state["plan"].steps:
        print("(no steps)")
    print("\nResult:\n", state["answer"])


if __name__ == "__main__":
    main()
