"""
npcgen CLI entry point.

Provides command-line interface for running the bot and generating NPCs
directly from the terminal.
"""

import argparse
import asyncio
import sys
from pathlib import Path

from npcgen import __version__
from npcgen.config.logging import LOG_PREFIX, get_logger, setup_logging
from npcgen.config.settings import Settings, load_settings
from npcgen.data.tables import CATEGORY_LIST, RANDOM_VALUE

SYSTEM_PROMPT_PATH = Path(__file__).parent / "prompts" / "system.txt"


def create_parser() -> argparse.ArgumentParser:
    """Create and configure argument parser."""
    parser = argparse.ArgumentParser(
        prog="npcgen",
        description="LLM-assisted NPC generator for D&D 5th edition virtual tabletops",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"npcgen {__version__}",
    )

    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to .env file (default: .env in current directory)",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Override logging level from config",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser(
        "run",
        help="Run the Discord bot (/npc slash command)",
    )

    subparsers.add_parser(
        "config",
        help="Show current configuration",
    )

    options_parser = subparsers.add_parser(
        "options",
        help="List the dialog categories and their options",
    )
    options_parser.add_argument(
        "--type",
        dest="npc_type",
        choices=["npc", "commoner"],
        default=None,
        help="Show the subtype and CR options offered for this type",
    )

    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate an NPC and write its actor JSON",
    )
    generate_parser.add_argument(
        "--type",
        dest="npc_type",
        default=RANDOM_VALUE,
        help="npc (class) or commoner (job); default: random",
    )
    generate_parser.add_argument(
        "--subtype",
        default=RANDOM_VALUE,
        help="Class or job, e.g. wizard, blacksmith (see 'npcgen options'); default: random",
    )
    generate_parser.add_argument(
        "--cr",
        default=RANDOM_VALUE,
        help="Challenge rating, e.g. 1/4, 3 (default: random for NPCs, 0 for commoners)",
    )
    generate_parser.add_argument("--race", default=RANDOM_VALUE, help="Race; default: random")
    generate_parser.add_argument("--gender", default=RANDOM_VALUE, help="Gender; default: random")
    generate_parser.add_argument(
        "--alignment",
        default=RANDOM_VALUE,
        help="Alignment, e.g. lawful-good; default: random",
    )
    generate_parser.add_argument("--name", default=None, help="Optional name for the NPC")
    generate_parser.add_argument(
        "--context",
        default=None,
        help="Optional setting or story context the NPC should fit into",
    )
    generate_parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Override the actor output directory (default: GENERATOR__OUTPUT_DIR)",
    )
    generate_parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for option resolution and stat rolls",
    )

    return parser


def cmd_config(settings: Settings) -> int:
    """Show current configuration."""
    logger = get_logger(__name__)

    logger.info("\n=== npcgen Configuration ===\n")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Log Level: {settings.log_level}")
    logger.info(f"Log File: {settings.log_file or 'None (console only)'}")
    logger.info(f"\nBot Name: {settings.bot.name}")
    logger.info(f"Bot Token: {'Set' if settings.bot.token else 'Not set'}")
    logger.info(f"\nLLM Model: {settings.llm.model}")
    logger.info(f"LLM API Key: {'Set' if settings.llm.api_key else 'Not set'}")
    logger.info(f"LLM JSON Mode: {settings.llm.json_mode}")
    logger.info(f"\nOutput Directory: {settings.generator.output_dir}")
    logger.info(f"Hide Alignment: {settings.generator.hide_alignment}")
    logger.info(f"Source Label: {settings.generator.source}")
    logger.info(f"\nItems Pack: {settings.compendium.items_pack or 'None'}")
    logger.info(f"Spells Pack: {settings.compendium.spells_pack or 'None'}")

    return 0


def cmd_options(args) -> int:
    """Print the dialog categories, or the type-dependent options for one type."""
    from npcgen.generator import options as dialog

    if args.npc_type:
        changed = dialog.change_dialog_category(args.npc_type)
        print(f"\n=== {args.npc_type} ===")
        print(f"{changed['subtype_label']}: "
              + ", ".join(option.value for option in changed["subtype"]))
        print("Challenge Rating: " + ", ".join(option.value for option in changed["cr"]))
        return 0

    for category in dialog.dialog_data(CATEGORY_LIST):
        print(f"\n{category.label} ({category.value}):")
        print("  " + ", ".join(option.value for option in category.option))
    return 0


def cmd_run(settings: Settings) -> int:
    """Start the Discord bot."""
    logger = get_logger(__name__)

    if not settings.bot.token:
        logger.error(
            "Discord bot token not set. Add BOT__TOKEN=<your-token> to your .env file."
        )
        return 1

    if not settings.llm.api_key:
        logger.warning(
            "LLM API key not set (LLM__API_KEY). "
            "The bot will start but /npc will fail until this is configured."
        )

    from npcgen.bot import NPCGenBot

    bot = NPCGenBot(settings)
    logger.info(f"Starting {settings.bot.name}...")
    # log_handler=None: disable discord.py's default logging setup and use ours
    bot.run(settings.bot.token, log_handler=None)
    return 0


async def cmd_generate(args, settings: Settings) -> int:
    """
    Generate one NPC from the command line.

    Flow:
      1. Resolve the selections (random where not given) and derive stats
      2. Ask the language model for name, biography, gear and weapon
      3. Write the actor JSON (with compendium items if packs are configured)
    """
    import random

    from npcgen.documents import JsonActorStore, get_settings_packs
    from npcgen.generator.builder import NPCGenerator
    from npcgen.generator.models import (
        InvalidSelectionError,
        NPCCreationError,
        NPCRequest,
    )
    from npcgen.llm import LLMError, LLMOrchestrator

    logger = get_logger(__name__)

    output_dir = args.output_dir or settings.generator.output_dir
    request = NPCRequest(
        type=args.npc_type,
        subtype=args.subtype,
        cr=args.cr,
        race=args.race,
        gender=args.gender,
        alignment=args.alignment,
        name=args.name,
        context=args.context,
    )

    try:
        packs = get_settings_packs(settings.compendium)
    except (OSError, ValueError) as e:
        logger.error(f"Could not load compendium packs: {e}")
        return 1

    orchestrator = LLMOrchestrator(
        settings=settings.llm,
        system_prompt=SYSTEM_PROMPT_PATH.read_text(encoding="utf-8"),
    )

    try:
        async with JsonActorStore(output_dir) as store:
            generator = NPCGenerator(
                settings=settings.generator,
                orchestrator=orchestrator,
                store=store,
                packs=packs,
                rng=random.Random(args.seed) if args.seed is not None else None,
            )

            logger.info(f"Sending to {settings.llm.model}...")
            try:
                result = await generator.generate(request)
            except InvalidSelectionError as e:
                print(f"\nInvalid selection: {e}", file=sys.stderr)
                print("Tip: Run 'npcgen options' to list valid values.", file=sys.stderr)
                return 1
            except LLMError as e:
                print(f"\nLLM error: {e}", file=sys.stderr)
                print("Tip: Set LLM__API_KEY in your .env file.", file=sys.stderr)
                return 1
            except NPCCreationError as e:
                print(f"\n{LOG_PREFIX} {e}", file=sys.stderr)
                return 1
    except OSError as e:
        logger.error(f"Could not use output directory {output_dir}: {e}")
        return 1

    npc = result.npc
    details = npc.details
    alignment = result.actor["system"]["details"]["alignment"]
    print(f"\n=== {npc.name} ===")
    print(f"{details.gender.label} {details.race.label}, "
          f"{details.sheet}: {details.subtype.label}, CR {details.cr.label}, "
          f"{alignment}")
    print(f"AC {npc.attributes.ac}  HP {npc.attributes.hp.max} ({npc.attributes.hp.formula})  "
          f"Speed {npc.attributes.movement.walk} ft")
    print("  ".join(f"{key.upper()} {ability.value}" for key, ability in npc.abilities.items()))
    if details.biography and details.biography.readaloud:
        print(f"\n{details.biography.readaloud}")
    print(f"\nEmbedded items: {len(result.actor.get('items', []))}")
    print(f"Actor written to: {result.path}")
    return 0


def main() -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args()

    # Load settings
    try:
        settings = load_settings(env_file=args.env_file)
    except Exception as e:
        print(f"Error loading settings: {e}", file=sys.stderr)
        return 1

    # Override log level if specified
    if args.log_level:
        settings.log_level = args.log_level

    setup_logging(settings)

    # Execute command
    if args.command == "config":
        return cmd_config(settings)
    elif args.command == "options":
        return cmd_options(args)
    elif args.command == "run":
        return cmd_run(settings)
    elif args.command == "generate":
        return asyncio.run(cmd_generate(args, settings))
    else:
        # Default: show help
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
