#file: backend/scheduler.py

import threading
import schedule
import logging
from typing import Callable


def run_schedule(job: Callable[[], None], seconds: int, name: str = "job") -> threading.Event :
    """Run `job` every `seconds` in a background thread; set the returned event to stop it."""
    scheduler = schedule.Scheduler()
    stop_event = threading.Event()

    def safe_job() :
        try :
            job()
        except Exception as e :
            logging.error(f"Scheduled {name} failed: {e}")

    scheduler.every(seconds).seconds.do(safe_job)

    def run_continuously() :
        while not stop_event.is_set() :
            scheduler.run_pending()
            stop_event.wait(1)
        scheduler.clear()
        logging.info(f"Scheduler for {name} stopped")

    thread = threading.Thread(target = run_continuously, name = f"schedule-{name}", daemon = True)
    thread.start()
    logging.info(f"Scheduler for {name} started in background thread (every {seconds}s)")
    return stop_event
