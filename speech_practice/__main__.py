"""
Speech Practice v1.0 — Console Practice Host

    python -m speech_practice --language spanish "Hola" "Gracias"
    python -m speech_practice --language french          # built-in phrases
    python -m speech_practice --memory                   # don't persist history

Phrases are "played" by printing them; attempts are typed on stdin.
"""

import argparse
import logging

from speech_practice.config import DATABASE_URL, LOG_LEVEL, configure_logging
from speech_practice.database import init_db, make_engine, make_session_factory
from speech_practice.practice.coach import PracticeCoach
from speech_practice.practice.engine import PracticeSessionEngine
from speech_practice.practice.history import SessionHistoryRepository
from speech_practice.practice.phrases import default_phrases, phrases_from_text
from speech_practice.storage import MemoryStore, SqlKeyValueStore
from speech_practice.voice.console import ConsoleRecognizer, ConsoleSynthesizer
from speech_practice.voice.recognition import SpeechInputAdapter
from speech_practice.voice.synthesis import SpeechOutputAdapter

logger = logging.getLogger(__name__)

COMMANDS = "[Enter] next · r retry · p previous · q quit"


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="speech_practice", description="Pronunciation practice in the terminal")
    parser.add_argument("phrases", nargs="*", help="phrases to practice (default: built-in set)")
    parser.add_argument("--language", default="english", help="language name, e.g. spanish")
    parser.add_argument("--memory", action="store_true", help="keep history in memory only")
    parser.add_argument("--log-level", default=LOG_LEVEL)
    return parser.parse_args(argv)


def build_history(in_memory: bool) -> SessionHistoryRepository:
    if in_memory:
        return SessionHistoryRepository(MemoryStore())
    engine = make_engine(DATABASE_URL)
    init_db(engine)
    return SessionHistoryRepository(SqlKeyValueStore(make_session_factory(engine)))


def build_coach(history: SessionHistoryRepository, read_line=input, output=print) -> PracticeCoach:
    return PracticeCoach(
        PracticeSessionEngine(history),
        SpeechInputAdapter(ConsoleRecognizer(read_line)),
        SpeechOutputAdapter(ConsoleSynthesizer(output)),
    )


def run(coach: PracticeCoach, language: str, phrases: list, read_line=input, output=print) -> None:
    coach.begin(language, phrases)
    output("\n" + "=" * 60)
    output(f"Pronunciation practice: {language} ({coach.language_tag}), {len(phrases)} phrases")
    output("=" * 60)

    while coach.engine.is_session_active:
        phrase = coach.engine.current_phrase
        position = coach.engine.current_phrase_index + 1
        output(f"\n[{position}/{len(phrases)}] {phrase.phrase}")
        if phrase.translation:
            output(f"    meaning: {phrase.translation}")
        if phrase.pronunciation:
            output(f"    sounds like: {phrase.pronunciation}")

        coach.play_current()
        feedback = coach.record_attempt().result()
        if feedback is None:
            output(f"  {coach.error or 'Nothing heard.'}")
        else:
            output(f"  You said: \"{coach.speech_input.transcript}\"")
            output(f"  Accuracy: {feedback.accuracy}% ({feedback.tier.value}). {feedback.message}")

        try:
            command = read_line(f"  {COMMANDS}: ").strip().lower()
        except EOFError:
            command = "q"

        if command == "r":
            continue
        if command == "p":
            coach.previous()
        elif command == "q":
            coach.finish()
        else:
            coach.next()

    session = coach.engine.current_session
    output("\n" + "=" * 60)
    output(f"Session complete. Score: {session.score}% over {len(session.results)}/{len(session.phrases)} phrases")
    output(f"Average score in {language}: {coach.engine.history.average_score(language)}%")
    output("=" * 60)


def main(argv=None) -> None:
    args = parse_args(argv)
    configure_logging(args.log_level)

    phrases = phrases_from_text(args.language, args.phrases) or default_phrases(args.language)
    coach = build_coach(build_history(args.memory))
    try:
        run(coach, args.language, phrases)
    except KeyboardInterrupt:
        logger.info("Practice interrupted")
    finally:
        coach.speech_input.close()
        coach.speech_output.close()


if __name__ == "__main__":
    main()
