import argparse
from datetime import datetime
import json
import logging

from dotenv import load_dotenv

from moviechat.chat_service import ChatService
from moviechat.config import Settings
from moviechat.db_init import create_db_engine, ensure_database_initialized
from moviechat.llm_service import ChatModelClient
from moviechat.query_executor import QueryExecutor
from moviechat.schema_context import load_schema_context

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


def _date_tag() -> str:
    return datetime.now().strftime("[%Y-%m-%d %H:%M:%S]")


def _pretty(data: object) -> str:
    return json.dumps(data, ensure_ascii=False, indent=2)


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Movie Chat SQL")
    parser.add_argument("--init-db", action="store_true", help="create and seed the movies table, then exit")
    parser.add_argument("--serve", action="store_true", help="run the HTTP API with uvicorn")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=5000)
    return parser.parse_args()


def _serve(settings: Settings, host: str, port: int) -> None:
    import uvicorn

    from moviechat.api import create_app

    uvicorn.run(create_app(settings), host=host, port=port)


def main():
    args = _parse_args()
    load_dotenv()
    settings = Settings.load()
    configure_logging(settings.log_level)

    if args.serve:
        _serve(settings, args.host, args.port)
        return

    schema_context = load_schema_context(settings.schema_context_path)
    engine = create_db_engine(settings)
    try:
        status = ensure_database_initialized(engine, schema_context)
        if args.init_db:
            print(_pretty(status))
            return

        service = ChatService(
            model=ChatModelClient(settings),
            executor=QueryExecutor(engine),
            schema_context=schema_context,
            debug=settings.is_development,
        )
        print(f"Movie Chat SQL ({settings.llm_model}) - ask about the {schema_context.table_name} table, 'exit' to quit.")

        while True:
            try:
                user_input = input(f"{_date_tag()}You> ").strip()
            except (EOFError, KeyboardInterrupt) as e:
                print(f"\n[Input Error] :{e}. Exiting.")
                return

            if not user_input:
                continue
            if user_input.lower() in ("exit", "quit", "/exit"):
                print("Bye!")
                return

            _, envelope = service.respond(user_input)
            print(f"{_date_tag()}AI>\n{_pretty(envelope.to_payload())}\n")
    finally:
        engine.dispose()


if __name__ == "__main__":
    main()
