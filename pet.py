#!/usr/bin/env python3
"""Desk Pet - Main CLI Entry Point"""

import sys
import time
import logging
import argparse
from pathlib import Path

from rich.prompt import Prompt, Confirm
from rich.live import Live
from rich.logging import RichHandler

from deskpet.config import config
from deskpet.configuration import ConfigurationManager
from deskpet.database import store
from deskpet.detection import StateDetector
from deskpet.messages import MessageLibraryManager, state_messages
from deskpet.models import MessageCategory, PetCarrier, PetState
from deskpet.notifications import NotificationManager
from deskpet.reminders import usage_reminder
from deskpet.resources import ResourceManager
from deskpet.sync import sync_manager
from deskpet.test_mode import test_mode
from deskpet.todos import todo_manager
from deskpet.widget import MEDIUM, SMALL, WidgetCenter, WidgetProvider
from deskpet import keys
from deskpet import ui


console = ui.console
logger = logging.getLogger('deskpet')

STATE_CHOICES = [state.value for state in PetState]


def setup_logging(level: str = None):
    """Send log records to the console through rich, and to LOG_FILE if set"""
    handlers = [RichHandler(console=console, show_path=False, rich_tracebacks=True)]
    if config.log_file:
        log_path = Path(config.log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding='utf-8')
        file_handler.setFormatter(logging.Formatter('%(asctime)s %(name)s %(levelname)s %(message)s'))
        handlers.append(file_handler)

    logging.basicConfig(
        level=level or config.log_level,
        format='%(message)s',
        datefmt='[%X]',
        handlers=handlers,
        force=True
    )


class PetCLI:
    """Main CLI application"""

    def __init__(self):
        self.running = True
        self.configuration = ConfigurationManager()
        self.notifications = NotificationManager(configuration=lambda: self.configuration.current)
        self.library = MessageLibraryManager()

    def run(self, args):
        """Main entry point"""
        parser = self.create_parser()
        parsed_args = parser.parse_args(args)

        if not hasattr(parsed_args, 'func'):
            if args:
                # Command group without a subcommand
                parser.parse_args(args + ['--help'])
            else:
                self.interactive_mode()
        else:
            parsed_args.func(parsed_args)

    def create_parser(self):
        """Create argument parser"""
        parser = argparse.ArgumentParser(
            description='Desk Pet - a virtual pet that reacts to how you use your computer',
            prog='pet'
        )

        subparsers = parser.add_subparsers(title='commands', dest='command')

        status_parser = subparsers.add_parser('status', help='Show the pet')
        status_parser.set_defaults(func=self.cmd_status)

        # State commands
        state_parser = subparsers.add_parser('state', help='Pet state')
        state_subparsers = state_parser.add_subparsers(title='state commands', dest='state_command')

        state_set_parser = state_subparsers.add_parser('set', help='Publish a state to every carrier')
        state_set_parser.add_argument('state', choices=STATE_CHOICES)
        state_set_parser.set_defaults(func=self.cmd_state_set)

        state_list_parser = state_subparsers.add_parser('list', help='List all states')
        state_list_parser.set_defaults(func=self.cmd_state_list)

        # Todo commands
        todo_parser = subparsers.add_parser('todo', help='Todo list')
        todo_subparsers = todo_parser.add_subparsers(title='todo commands', dest='todo_command')

        todo_add_parser = todo_subparsers.add_parser('add', help='Add a todo')
        todo_add_parser.add_argument('text', nargs='+', help='Todo text')
        todo_add_parser.set_defaults(func=self.cmd_todo_add)

        todo_list_parser = todo_subparsers.add_parser('list', help='Show all todos')
        todo_list_parser.set_defaults(func=self.cmd_todo_list)

        todo_toggle_parser = todo_subparsers.add_parser('toggle', help='Mark a todo done or not done')
        todo_toggle_parser.add_argument('ref', help='List number or id prefix')
        todo_toggle_parser.set_defaults(func=self.cmd_todo_toggle)

        todo_delete_parser = todo_subparsers.add_parser('delete', help='Delete a todo')
        todo_delete_parser.add_argument('ref', help='List number or id prefix')
        todo_delete_parser.set_defaults(func=self.cmd_todo_delete)

        # Test mode commands
        testmode_parser = subparsers.add_parser('testmode', help='Speed up reminders for testing')
        testmode_parser.add_argument('action', choices=['on', 'off', 'toggle', 'status'], nargs='?', default='status')
        testmode_parser.set_defaults(func=self.cmd_testmode)

        # Reminder commands
        remind_parser = subparsers.add_parser('remind', help='Usage reminders')
        remind_subparsers = remind_parser.add_subparsers(title='reminder commands', dest='remind_command')

        remind_check_parser = remind_subparsers.add_parser('check', help='Run the reminder checks now')
        remind_check_parser.set_defaults(func=self.cmd_remind_check)

        sim_inactive_parser = remind_subparsers.add_parser('simulate-inactivity', help='Pretend you were away')
        sim_inactive_parser.add_argument('hours', type=float)
        sim_inactive_parser.set_defaults(func=self.cmd_remind_simulate_inactivity)

        sim_usage_parser = remind_subparsers.add_parser('simulate-usage', help='Pretend the app was in use')
        sim_usage_parser.add_argument('minutes', type=float)
        sim_usage_parser.set_defaults(func=self.cmd_remind_simulate_usage)

        remind_reset_parser = remind_subparsers.add_parser('reset', help='Treat yourself as active now')
        remind_reset_parser.set_defaults(func=self.cmd_remind_reset)

        remind_thresholds_parser = remind_subparsers.add_parser('thresholds', help='Show effective thresholds')
        remind_thresholds_parser.set_defaults(func=self.cmd_remind_thresholds)

        remind_set_parser = remind_subparsers.add_parser('set', help='Change a threshold (hours)')
        remind_set_parser.add_argument(
            'threshold',
            choices=['inactivity-warning', 'inactivity-limit', 'check-interval', 'continuous-warning']
        )
        remind_set_parser.add_argument('hours', type=float)
        remind_set_parser.set_defaults(func=self.cmd_remind_set)

        # Message commands
        messages_parser = subparsers.add_parser('messages', help='State messages')
        messages_subparsers = messages_parser.add_subparsers(title='message commands', dest='messages_command')

        messages_list_parser = messages_subparsers.add_parser('list', help='Show messages for a state')
        messages_list_parser.add_argument('state', choices=STATE_CHOICES)
        messages_list_parser.set_defaults(func=self.cmd_messages_list)

        messages_add_parser = messages_subparsers.add_parser('add', help='Add a custom message')
        messages_add_parser.add_argument('state', choices=STATE_CHOICES)
        messages_add_parser.add_argument('content', nargs='+')
        messages_add_parser.set_defaults(func=self.cmd_messages_add)

        messages_delete_parser = messages_subparsers.add_parser('delete', help='Delete a message')
        messages_delete_parser.add_argument('ref', help='Message id or id prefix')
        messages_delete_parser.set_defaults(func=self.cmd_messages_delete)

        messages_library_parser = messages_subparsers.add_parser('library', help='Load the notification message library')
        messages_library_parser.add_argument('file', help='JSON message file')
        messages_library_parser.set_defaults(func=self.cmd_messages_library)

        # Widget
        widget_parser = subparsers.add_parser('widget', help='Show the home screen widget')
        widget_parser.add_argument('--size', choices=[SMALL, MEDIUM], default=SMALL)
        widget_parser.add_argument('--watch', action='store_true', help='Keep refreshing like a real widget')
        widget_parser.set_defaults(func=self.cmd_widget)

        # Detection and resources
        detect_parser = subparsers.add_parser('detect', help='Estimate your current status')
        detect_parser.add_argument('--apply', action='store_true', help='Publish the detected state')
        detect_parser.set_defaults(func=self.cmd_detect)

        resources_parser = subparsers.add_parser('resources', help='Look up expression resources')
        resources_parser.add_argument('file', help='JSON resource file')
        resources_parser.add_argument('state', choices=STATE_CHOICES)
        resources_parser.add_argument('--carrier', choices=[c.value for c in PetCarrier], default=PetCarrier.WIDGET.value)
        resources_parser.set_defaults(func=self.cmd_resources)

        # Notifications
        notify_parser = subparsers.add_parser('notify', help='Schedule a notification')
        notify_parser.add_argument('message', nargs='*', help='Text (default: a library message for the category)')
        notify_parser.add_argument(
            '--category',
            choices=[c.value for c in MessageCategory],
            default=MessageCategory.DAILY_CARE.value
        )
        notify_parser.add_argument('--in', dest='in_seconds', type=float, default=0, help='Delay in seconds')
        notify_parser.set_defaults(func=self.cmd_notify)

        # Config
        config_parser = subparsers.add_parser('config', help='Show or change configuration')
        config_parser.add_argument('--name', help='Pet name')
        config_parser.add_argument('--sensitivity', type=float)
        config_parser.add_argument('--notifications', choices=['on', 'off'])
        config_parser.add_argument('--quiet-hours', nargs=2, type=int, metavar=('START', 'END'))
        config_parser.set_defaults(func=self.cmd_config)

        # Foreground monitoring
        run_parser = subparsers.add_parser('run', help='Keep the pet running and watching your usage')
        run_parser.set_defaults(func=self.cmd_run)

        return parser

    # Pet state

    def cmd_status(self, args):
        """Show the pet"""
        console.print(self._pet_panel())

    def _pet_panel(self, footer: str = None):
        return ui.create_pet_panel(
            sync_manager.current_state(),
            store.get(keys.SHARED_ICON),
            store.get(keys.SHARED_STATE_MESSAGE),
            test_mode=test_mode.enabled,
            footer=footer
        )

    def cmd_state_set(self, args):
        """Publish a state"""
        sync_manager.update_all_carriers(PetState(args.state))
        console.print(self._pet_panel())

    def cmd_state_list(self, args):
        ui.display_state_list()

    # Todos

    def cmd_todo_add(self, args):
        """Add a todo"""
        todo = todo_manager.add_todo(' '.join(args.text))
        if todo is None:
            ui.print_warning("Empty todo, nothing added")
            return
        ui.print_success(f"Added: {todo.text}")

    def cmd_todo_list(self, args):
        ui.display_todo_list(todo_manager.todos)

    def _find_todo(self, ref: str):
        todo = todo_manager.get_todo(ref)
        if todo is None:
            raise ValueError(f"Todo not found: {ref}")
        return todo

    def cmd_todo_toggle(self, args):
        """Toggle a todo"""
        todo = todo_manager.toggle_todo(self._find_todo(args.ref).id)
        ui.print_success(f"{'Done' if todo.is_completed else 'Not done'}: {todo.text}")

    def cmd_todo_delete(self, args):
        """Delete a todo"""
        todo = self._find_todo(args.ref)
        todo_manager.delete_todo(todo.id)
        ui.print_success(f"Deleted: {todo.text}")

    # Test mode

    def cmd_testmode(self, args):
        """Change or show test mode"""
        if args.action == 'on':
            test_mode.enabled = True
        elif args.action == 'off':
            test_mode.enabled = False
        elif args.action == 'toggle':
            test_mode.toggle()

        state = "[yellow]on[/yellow]" if test_mode.enabled else "off"
        console.print(f"Test mode: {state} ({test_mode.time_scale_factor:g}x)")
        ui.display_time_scaling(test_mode.validate_time_scaling())

    # Reminders

    def cmd_remind_check(self, args):
        usage_reminder.manual_check()
        console.print(self._pet_panel())

    def cmd_remind_simulate_inactivity(self, args):
        """Simulate being away"""
        # A one-shot command exits before a timer could fire, so restore right away
        usage_reminder.simulate_inactivity(args.hours, restore_after=0)
        console.print(self._pet_panel())

    def cmd_remind_simulate_usage(self, args):
        """Simulate continuous use"""
        usage_reminder.simulate_continuous_usage(args.minutes, restore_after=0)
        console.print(self._pet_panel())

    def cmd_remind_reset(self, args):
        usage_reminder.reset_inactivity_state()
        ui.print_success("Inactivity state reset")

    def cmd_remind_thresholds(self, args):
        ui.display_thresholds(usage_reminder.validate_test_mode_thresholds(), test_mode.enabled)

    def cmd_remind_set(self, args):
        """Change a reminder threshold"""
        setters = {
            'inactivity-warning': usage_reminder.update_inactivity_warning,
            'inactivity-limit': usage_reminder.update_inactivity_limit,
            'check-interval': usage_reminder.update_check_interval,
            'continuous-warning': usage_reminder.update_continuous_warning,
        }
        setters[args.threshold](args.hours)
        ui.print_success(f"{args.threshold} set to {args.hours:g}h")

    # Messages

    def cmd_messages_list(self, args):
        state = PetState(args.state)
        ui.display_messages(state, state_messages.get_messages(state))

    def cmd_messages_add(self, args):
        message = state_messages.add_message(PetState(args.state), ' '.join(args.content))
        ui.print_success(f"Added message {message.id[:8]}")

    def cmd_messages_delete(self, args):
        """Delete a message"""
        message = state_messages.find_message(args.ref)
        if message is None:
            raise ValueError(f"Message not found: {args.ref}")
        state_messages.delete_message(message.id)
        ui.print_success(f"Deleted: {message.content}")

    def cmd_messages_library(self, args):
        """Replace the notification message library from a file"""
        self.library.load(Path(args.file).read_text(encoding='utf-8'))
        ui.print_success(f"Loaded {len(self.library.messages)} library messages")

    # Widget

    def cmd_widget(self, args):
        """Render the widget once, or keep it live with --watch"""
        provider = WidgetProvider()
        if not args.watch:
            entries, _ = provider.timeline()
            console.print(ui.create_widget_display(entries[0], args.size, provider.is_test_mode()))
            return

        self.live_widget_display(provider, args.size)

    def live_widget_display(self, provider: WidgetProvider, size: str):
        """
        Follow the timeline the way the system drives a widget

        The timeline is rebuilt when its refresh date passes or when the app
        bumps the reload token.
        """
        widget_center = WidgetCenter()
        token = widget_center.reload_token()
        entries, next_refresh = provider.timeline()
        test = provider.is_test_mode()

        with Live(console=console, refresh_per_second=2, transient=False) as live:
            while True:
                now = provider.clock()
                current_token = widget_center.reload_token()

                if now >= next_refresh or current_token != token:
                    token = current_token
                    entries, next_refresh = provider.timeline()
                    test = provider.is_test_mode()

                entry = entries[0]
                for candidate in entries:
                    if candidate.date <= now:
                        entry = candidate

                live.update(ui.create_widget_display(entry, size, test))
                time.sleep(0.5)

    # Detection and resources

    def cmd_detect(self, args):
        """Estimate the user's status"""
        snapshot = StateDetector().detect()
        ui.display_detection(snapshot)
        if args.apply:
            sync_manager.update_all_carriers(snapshot.detected_state)
            ui.print_success(f"Pet is now {snapshot.detected_state.value}")

    def cmd_resources(self, args):
        """List resources for a state from a resource file"""
        manager = ResourceManager()
        manager.load(Path(args.file).read_text(encoding='utf-8'))

        resources = manager.resources(PetState(args.state), PetCarrier(args.carrier))
        if not resources:
            ui.print_info("No matching resources")
            return
        for resource in resources:
            console.print(f"[cyan]{resource.priority:>3}[/cyan] {resource.display} [dim]{resource.id}[/dim]")

    # Notifications

    def cmd_notify(self, args):
        """Schedule a notification and wait for it"""
        category = MessageCategory(args.category)
        text = ' '.join(args.message)
        if not text:
            item = self.library.random_message(category)
            if item is None:
                raise ValueError(f"No library messages for {category.value}; pass a message or load a library")
            self.library.mark_used(item.id)
            text = item.content

        timer = self.notifications.schedule(text, category, args.in_seconds)
        if timer is None:
            ui.print_warning("Notifications are disabled")
            return
        timer.join()

    # Config

    def cmd_config(self, args):
        """Show configuration, applying any changes first"""
        current = self.configuration.current
        changed = False

        if args.name:
            current.name = args.name
            changed = True
        if args.sensitivity is not None:
            if not 0.0 <= args.sensitivity <= 1.0:
                raise ValueError("Sensitivity must be between 0 and 1")
            current.sensitivity = args.sensitivity
            changed = True
        if args.notifications:
            current.notification_preference.enable_notifications = args.notifications == 'on'
            changed = True
        if args.quiet_hours:
            start, end = args.quiet_hours
            if not (0 <= start <= 23 and 0 <= end <= 23):
                raise ValueError("Quiet hours must be between 0 and 23")
            current.notification_preference.quiet_hours = (start, end)
            changed = True

        if changed:
            self.configuration.update(current)
            ui.print_success("Configuration saved")

        console.print("[bold]Configuration:[/bold]")
        console.print(f"Shared store: {config.db_path}")
        console.print(f"Test mode scale: {config.test_mode_scale:g}x")
        console.print(f"Log level: {config.log_level}")
        ui.display_configuration(self.configuration.current)

    # Foreground monitoring

    def cmd_run(self, args):
        """Run the reminder loop with a live pet panel until interrupted"""
        usage_reminder.app_did_become_active()
        usage_reminder.start_monitoring()

        try:
            with Live(console=console, refresh_per_second=1, transient=False) as live:
                while True:
                    footer = f"Checking every {usage_reminder.current_check_interval():g}s. Press Ctrl+C to stop"
                    live.update(self._pet_panel(footer))
                    time.sleep(1)
        finally:
            usage_reminder.app_did_enter_background()
            usage_reminder.stop_monitoring()

    def interactive_mode(self):
        """Run in interactive mode"""
        console.print("[bold cyan]Desk Pet[/bold cyan]")
        console.print("Type 'help' for commands, 'quit' to exit\n")

        usage_reminder.app_did_become_active()
        console.print(self._pet_panel())

        while self.running:
            try:
                command = Prompt.ask("\n[bold]pet[/bold]").strip()

                if command.lower() in ['quit', 'exit', 'q']:
                    self.running = False
                    break

                if command.lower() in ['help', 'h', '?']:
                    self.show_help()
                    continue

                if command:
                    self.run(command.split())

            except KeyboardInterrupt:
                console.print("\n")
                if Confirm.ask("Exit?", default=False):
                    self.running = False
            except SystemExit:
                # argparse exits on bad input; stay in the loop
                pass
            except ValueError as e:
                ui.print_error(str(e))

        usage_reminder.app_did_enter_background()

    def show_help(self):
        """Show help message"""
        console.print("""
[bold]Pet:[/bold]
  status                         Show the pet
  state set <state>              Publish a state everywhere
  state list                     List all states
  detect [--apply]               Estimate your status

[bold]Todos:[/bold]
  todo add <text>                Add a todo
  todo list                      Show all todos
  todo toggle <ref>              Mark done / not done
  todo delete <ref>              Delete a todo

[bold]Reminders:[/bold]
  testmode [on|off|toggle]       Speed up reminders 120x
  remind check                   Run the checks now
  remind simulate-inactivity H   Pretend you were away H hours
  remind simulate-usage M        Pretend the app ran M minutes
  remind reset                   Treat yourself as active now
  remind thresholds              Show effective thresholds
  remind set <name> <hours>      Change a threshold

[bold]Messages:[/bold]
  messages list <state>          Show messages for a state
  messages add <state> <text>    Add a custom message
  messages delete <ref>          Delete a message
  messages library <file>        Load notification texts

[bold]Other:[/bold]
  widget [--size] [--watch]      Show the widget
  notify [text] [--in S]         Send a notification
  config                         Show or change configuration
  run                            Watch your usage in the foreground
  help                           Show this help
  quit                           Exit
        """)


def main():
    """Main entry point"""
    setup_logging()
    try:
        cli = PetCLI()
        cli.run(sys.argv[1:])
    except KeyboardInterrupt:
        console.print("\n[dim]Interrupted[/dim]")
        sys.exit(0)
    except ValueError as e:
        ui.print_error(str(e))
        sys.exit(2)
    except Exception as e:
        logger.debug("Fatal error", exc_info=True)
        ui.print_error(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
