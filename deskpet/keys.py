"""Key names in the shared store"""

# Suites
STANDARD = 'standard'
GROUP = 'group'

# Shared with the widget (group suite)
SHARED_STATE = 'pet.shared.state'
SHARED_EMOTION = 'pet.shared.emotion'
SHARED_TODOS = 'pet.shared.todos'
SHARED_LAST_ACTIVE = 'pet.shared.lastActiveTime'
SHARED_STATE_MESSAGE = 'pet.shared.stateMessage'
SHARED_ICON = 'pet.shared.icon'
SHARED_TEST_MODE = 'pet.shared.testMode'
SHARED_WIDGET_RELOAD = 'pet.shared.widgetReload'

# Main app only (standard suite)
TEST_MODE_ENABLED = 'isTestModeEnabled'
INACTIVITY_WARNING_HOURS = 'inactivityWarningHours'
INACTIVITY_LIMIT_HOURS = 'inactivityLimitHours'
CHECK_INTERVAL_HOURS = 'checkIntervalHours'
CONTINUOUS_WARNING_HOURS = 'continuousWarningHours'
APP_LAUNCH_TIME = 'appLaunchTime'
STATE_MESSAGES = 'stateMessages'
MAX_MESSAGES_PER_STATE = 'maxMessagesPerState'
MESSAGE_LIBRARY = 'messageLibrary'
PET_CONFIGURATION = 'petConfiguration'
