"""Request source base module"""

from command_input.scripted_requests import ScriptedRequests, RequestScripts

__all__ = ["ScriptedRequests", "RequestScripts"]
