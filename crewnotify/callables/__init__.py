from crewnotify.callables.poke import poke_crew
from crewnotify.callables.poll_reminder import remind_poll_non_responders

__all__ = ["poke_crew", "remind_poll_non_responders"]
