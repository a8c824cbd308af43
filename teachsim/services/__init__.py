from teachsim.services.progress import ACHIEVEMENTS, InvalidInput, fold_session
from teachsim.services.profile_store import load_snapshot, save_session_results

__all__ = ["ACHIEVEMENTS", "InvalidInput", "fold_session", "load_snapshot", "save_session_results"]
