"""
Support Q&A Bot entry point.
Supports CLI mode and web server mode.

Usage:
    python app.py --web              # Launch the JSON API server (default)
    python app.py --question "..."   # Ask a single question
    python app.py --search "..."     # Show retrieved chunks and the composed prompt
    python app.py --interactive      # Interactive CLI mode
"""

import argparse
import sys


def main():
    parser = argparse.ArgumentParser(
        description="Bilingual customer-support chatbot grounded in company documents"
    )
    parser.add_argument(
        "--web", action="store_true", default=True,
        help="Launch the web API (default)"
    )
    parser.add_argument(
        "--question", "-q", type=str, default=None,
        help="Ask a single question from the command line"
    )
    parser.add_argument(
        "--search", "-s", type=str, default=None,
        help="Print the retrieved chunks and prompt for a query, without calling the model"
    )
    parser.add_argument(
        "--interactive", "-i", action="store_true",
        help="Run in interactive CLI mode"
    )
    parser.add_argument(
        "--port", type=int, default=None,
        help="Port for the web server (default: 3000)"
    )

    args = parser.parse_args()

    import config
    from supportbot.errors import SupportBotError
    from supportbot.logging_utils import setup_logging
    from supportbot.pipeline import SupportChatPipeline

    setup_logging(config.LOG_LEVEL, config.LOG_FILE or None)

    try:
        pipeline = SupportChatPipeline.from_config()
        pipeline.initialize()
    except SupportBotError as e:
        print(f"[ERROR] {e.message}", file=sys.stderr)
        sys.exit(1)

    # Retrieval-only mode
    if args.search:
        chunks = pipeline.search(args.search)
        bundle = pipeline.compose_prompt(args.search, chunks)
        print(f"\nQuery: {args.search} (language: {bundle.language})")
        for i, c in enumerate(chunks, 1):
            print(f"  {i}. {c.source} [{c.type}, {c.language}] score={c.score:.1f}")
        print(f"\n--- System prompt ---\n{bundle.system_prompt}")
        print(f"\n--- User prompt ---\n{bundle.user_prompt}")
        return

    # Single question mode
    if args.question:
        try:
            result = pipeline.ask(args.question)
        except SupportBotError as e:
            print(f"[ERROR] {e.message}", file=sys.stderr)
            sys.exit(1)
        print(f"\nQ: {args.question}")
        print(f"\n{result['response']}")
        if result["sources"]:
            print(f"\nSources: {', '.join(result['sources'])}")
        return

    # Interactive CLI mode
    if args.interactive:
        print("\n=== Interactive Mode (type 'quit' to exit) ===\n")
        while True:
            try:
                question = input("You: ").strip()
                if question.lower() in ("quit", "exit", "q"):
                    print("Goodbye!")
                    break
                if not question:
                    continue

                result = pipeline.ask(question)
                print(f"\nAssistant: {result['response']}")
                if result["sources"]:
                    print(f"\nSources: {', '.join(result['sources'])}")
                print()
            except SupportBotError as e:
                print(f"\n[ERROR] {e.message}\n")
            except KeyboardInterrupt:
                print("\nGoodbye!")
                break
        return

    # Web mode (default)
    from frontend.ratelimit import SlidingWindowRateLimiter
    from frontend.server import create_app

    port = args.port or config.WEB_PORT
    app = create_app(
        pipeline,
        rate_limiter=SlidingWindowRateLimiter(config.RATE_LIMIT_WINDOW, config.RATE_LIMIT_MAX),
        app_env=config.APP_ENV,
        cors_origin=config.CORS_ORIGIN,
    )
    print(f"\nStarting web server at http://{config.WEB_HOST}:{port}")
    print("   Press Ctrl+C to stop.\n")
    app.run(host=config.WEB_HOST, port=port, debug=False, threaded=True)


if __name__ == "__main__":
    main()
