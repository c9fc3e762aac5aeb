#!/usr/bin/env python3
"""
Background jobs for keeping the tank game database consistent.
Run as cron jobs or scheduled tasks.

Usage:
    python scripts/background_jobs.py validate-integrity
    python scripts/background_jobs.py cleanup-orphans
    python scripts/background_jobs.py system-stats
"""

import sys
import logging
from datetime import datetime
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from tankgame.core.database import SessionLocal
from tankgame.services.consistency_manager import ConsistencyManager

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler('background_jobs.log'),
        logging.StreamHandler()
    ]
)
logger = logging.getLogger(__name__)


def validate_data_integrity():
    """Weekly job: Comprehensive data integrity validation."""
    logger.info("=== STARTING DATA INTEGRITY VALIDATION ===")

    with SessionLocal() as db:
        consistency_manager = ConsistencyManager(db)

        try:
            results = consistency_manager.validate_data_integrity()

            logger.info("Integrity validation completed:")
            logger.info(f"  Total issues found: {results['total_issues']}")

            for issue_type, issues in results['issues'].items():
                if issues:
                    logger.warning(f"  {issue_type}: {len(issues)} issues")
                    for issue in issues[:5]:  # Log first 5 issues
                        logger.warning(f"    {issue}")
                    if len(issues) > 5:
                        logger.warning(f"    ... and {len(issues) - 5} more")
                else:
                    logger.info(f"  {issue_type}: No issues found")

            return results['total_issues'] == 0

        except Exception as e:
            logger.error(f"Error in integrity validation: {e}")
            return False


def cleanup_orphans():
    """Daily job: Remove players whose game was destroyed."""
    logger.info("=== STARTING ORPHAN CLEANUP ===")

    with SessionLocal() as db:
        consistency_manager = ConsistencyManager(db)

        try:
            deleted_count = consistency_manager.cleanup_orphaned_players()
            logger.info(f"Orphan cleanup completed: {deleted_count} players removed")
            return True

        except Exception as e:
            logger.error(f"Error in orphan cleanup: {e}")
            db.rollback()
            return False


def show_system_stats():
    """Show current system statistics."""
    logger.info("=== SYSTEM STATISTICS ===")

    with SessionLocal() as db:
        try:
            stats = ConsistencyManager(db).system_stats()
            logger.info(f"Games: {stats['games']}")
            logger.info(f"Players: {stats['players']}")
            logger.info(f"Unspent actions: {stats['total_actions']}")
            return True

        except Exception as e:
            logger.error(f"Error getting system stats: {e}")
            return False


def main():
    """Main CLI entry point."""
    if len(sys.argv) != 2:
        print(__doc__)
        sys.exit(1)

    command = sys.argv[1]
    success = False

    start_time = datetime.now()

    if command == "validate-integrity":
        success = validate_data_integrity()
    elif command == "cleanup-orphans":
        success = cleanup_orphans()
    elif command == "system-stats":
        success = show_system_stats()
    else:
        logger.error(f"Unknown command: {command}")
        print(__doc__)
        sys.exit(1)

    duration = datetime.now() - start_time
    logger.info(f"Command '{command}' completed in {duration}")

    if success:
        logger.info("Job completed successfully")
        sys.exit(0)
    else:
        logger.error("Job failed")
        sys.exit(1)


if __name__ == "__main__":
    main()
