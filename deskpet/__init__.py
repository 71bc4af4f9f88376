"""Desk pet: mood, usage reminders, todos and a widget sharing one store"""

__version__ = "0.1.0"
