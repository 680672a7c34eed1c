#!/usr/bin/env python3
"""
config/harness_config.py - Range-hold test harness configuration
"""

HARNESS_CONFIG = {
    'test_name': 'RNGHLD',
    'update_period_ms': 20,             # host tick interval

    # Vehicle flight modes (ArduSub numbering)
    'modes': {
        'manual': 19,
        'range_hold': 21,
    },

    # Approximate vehicle speeds at the override PWMs, used for timeouts
    'approx_speed_updown_mps': 0.5,
    'approx_speed_forward_mps': 1.0,
    'timeout_factor': 1.5,

    # State thresholds
    'init_timeout_s': 10.0,
    'depth_match_tolerance_m': 0.25,
    'test_range_1_m': 8.0,              # first descent: this far above the mean bottom
    'test_range_2_m': 14.0,             # depth change between the two traverses
    'pause_s': 5.0,

    # RC override channels and PWM values used to command velocity
    'rc': {
        'throttle_channel': 3,
        'forward_channel': 5,
        'pwm_neutral': 1500,
        'pwm_up': 1700,
        'pwm_down': 1300,
        'pwm_forward': 1700,
        'pwm_half_range': 200,
    },

    # Scripting rangefinder backend the harness pushes samples into
    'rangefinder': {
        'sensor_number': 1,             # RNGFND1
        'scripting_type_code': 36,      # RNGFND1_TYPE = 36
    },

    # Parameters read once at test start, with defaults
    'parameters': {
        'pattern_id': {'name': 'SCR_USER1', 'default': 1},
        'bottom_depth_m': {'name': 'SCR_USER2', 'default': 22.0, 'min_abs': 0.1},
        'match_tolerance_m': {'name': 'SCR_USER3', 'default': 2.0, 'min_abs': 0.0001},
    },

    # Range hold model of the simulated vehicle
    'simulated_vehicle': {
        'range_hold_gain_per_s': 2.0,   # climb rate per meter of range error
        'range_hold_max_rate_mps': 1.5,
        'range_filter_window': 5,       # median of the latest rangefinder samples
    },

    # Status message channel
    'status': {
        'severity_info': 6,
        'trim_period_s': 1.0,
    },
}
