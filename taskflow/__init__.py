"""TaskFlow - task and time tracking engine"""

__version__ = "1.0.0"
