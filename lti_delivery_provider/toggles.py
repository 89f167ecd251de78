"""
Toggles for the LTI delivery provider
"""
from edx_toggles.toggles import SettingToggle

# .. toggle_name: FEATURE_FLAG_MAINTAIN_RESTARTED_DELIVERY_EXECUTION_STATE
# .. toggle_implementation: SettingToggle
# .. toggle_default: False
# .. toggle_description: Controls whether a delivery execution state should be kept as is or reset each time it
#    starts. When disabled, an active execution is paused on each relaunch. When enabled, the state is maintained
#    upon a relaunch.
# .. toggle_use_cases: open_edx
# .. toggle_creation_date: 2021-06-01
# .. toggle_warning: None.
FEATURE_FLAG_MAINTAIN_RESTARTED_DELIVERY_EXECUTION_STATE = 'FEATURE_FLAG_MAINTAIN_RESTARTED_DELIVERY_EXECUTION_STATE'


def get_maintain_restarted_delivery_execution_state_toggle():
    return SettingToggle(FEATURE_FLAG_MAINTAIN_RESTARTED_DELIVERY_EXECUTION_STATE, default=False, module_name=__name__)


def is_delivery_execution_state_reset_enabled():
    """
    Return True when restarted executions must have their state reset.
    """
    return not get_maintain_restarted_delivery_execution_state_toggle().is_enabled()
