#!/usr/bin/env python3
"""
Experiment definitions and rollout specifications.

An ExperimentDefinition is built from one catalogue entry and validated as it
is built. Problems are returned next to the new definition and kept on it, so a
definition that failed validation refuses any rollout attached afterwards.

Rollout rules, per platform:
- a uniform default_value applies to every platform
- otherwise platform_value must name a value for each known platform
- an experiment with requirements always defaults to "debug", and its
  constraint text lists the requirements
"""

import sys
from datetime import date, datetime, timedelta

from .config import normalize_token
from .errors import InvalidArgumentError


MONITORING_EXPERIMENT = 'monitoring_experiment'
NEVER_EXPIRES = 'never-ever'
DEBUG_DEFAULT = 'debug'
EXPIRY_FORMAT = '%Y-%m-%d'

# Two quarters.
MAX_EXPIRY_DAYS = 180


def _construction_errors(name, description, owner, expiry):
    errors = []
    if not name:
        errors.append("experiment with no name")
    if not description:
        errors.append(f"no description for experiment {name}")
    if not owner:
        errors.append(f"no owner for experiment {name}")
    if not expiry:
        errors.append(f"no expiry for experiment {name}")
    if name == MONITORING_EXPERIMENT and expiry != NEVER_EXPIRES:
        errors.append(f"{MONITORING_EXPERIMENT} should never expire")
    return errors


def in_freeze_window(expiry_date):
    """Expiry may not fall between Nov 1 and Jan 15, when experiment lists stay frozen."""
    return (
        expiry_date.month in (11, 12) or
        (expiry_date.month == 1 and expiry_date.day < 15)
    )


class RolloutSpecification:
    """Desired default for one experiment, uniform or per platform."""

    def __init__(self, name, default_value='', platform_value=None, requirements=None):
        self.name = name
        self.default_value = default_value
        self.platform_value = dict(platform_value or {})
        self.requirements = list(requirements or [])

    @classmethod
    def from_node(cls, node):
        """
        Build a specification from a decoded rollout entry.

        default_value wins when present; otherwise platform_value is required.

        Raises:
            InvalidArgumentError: the entry has neither value
        """
        name = node['name']
        requirements = node.get('requirements') or []

        if 'default_value' in node:
            return cls(name, default_value=normalize_token(node['default_value']),
                       requirements=requirements)

        if 'platform_value' not in node:
            raise InvalidArgumentError(f"No default value or platform value for rollout: {name}")

        platform_value = {
            platform: normalize_token(value)
            for platform, value in (node['platform_value'] or {}).items()
        }
        return cls(name, platform_value=platform_value, requirements=requirements)

    def __repr__(self):
        return (f"RolloutSpecification(name={self.name!r}, default_value={self.default_value!r}, "
                f"platform_value={self.platform_value!r}, requirements={self.requirements!r})")


class ExperimentDefinition:
    """One experiment's declared metadata and its per-platform rollout."""

    def __init__(self, name='', description='', owner='', expiry='', uses_polling=False,
                 allow_in_fuzzing_config=False, test_tags=None, requirements=None):
        self.name = name
        self.description = description
        self.owner = owner
        self.expiry = expiry
        self.uses_polling = uses_polling
        self.allow_in_fuzzing_config = allow_in_fuzzing_config
        self.test_tags = list(test_tags or [])
        self._requires = []
        self._add_requirements(requirements or [])
        self._defaults = {}
        self._additional_constraints = {}

        self.errors = _construction_errors(name, description, owner, expiry)
        for error in self.errors:
            print(f"ERROR: {error}", file=sys.stderr)
        if self.errors:
            print("ERROR: Failed to create experiment definition", file=sys.stderr)

    @classmethod
    def create(cls, **fields):
        """Build a definition and return it with its validation problems: (definition, errors)."""
        definition = cls(**fields)
        return definition, list(definition.errors)

    @classmethod
    def from_node(cls, node):
        """Build from a schema-checked catalogue entry. Returns (definition, errors)."""
        return cls.create(
            name=node['name'],
            description=node['description'],
            owner=node['owner'],
            expiry=normalize_expiry(node['expiry']),
            uses_polling=node['uses_polling'],
            allow_in_fuzzing_config=node['allow_in_fuzzing_config'],
            test_tags=node['test_tags'],
        )

    @property
    def error(self):
        return bool(self.errors)

    @property
    def requirements(self):
        return list(self._requires)

    def default_value(self, platform):
        """Resolved default token for platform; experiments without a rollout are off."""
        return self._defaults.get(platform, 'false')

    def additional_constraints(self, platform):
        return self._additional_constraints.get(platform, '')

    def _add_requirements(self, requirements):
        for requirement in requirements:
            if requirement not in self._requires:
                self._requires.append(requirement)

    def _fail(self, message):
        print(f"ERROR: {message}", file=sys.stderr)
        self.errors.append(message)
        return False, [message]

    def is_valid(self, check_expiry=False, today=None):
        """
        Check the definition can be used.

        The freeze window is always enforced. With check_expiry, expired or
        far-future dates print warnings but never make the result false.
        """
        if self.error:
            return False
        if self.name == MONITORING_EXPERIMENT and self.expiry == NEVER_EXPIRES:
            return True

        try:
            expiry_date = datetime.strptime(self.expiry, EXPIRY_FORMAT).date()
        except ValueError:
            print(f"ERROR: Invalid date format in expiry: {self.expiry} for experiment {self.name}",
                  file=sys.stderr)
            return False

        if in_freeze_window(expiry_date):
            print(f"ERROR: For experiment {self.name}: Experiment expiration is not allowed "
                  f"between Nov 1 and Jan 15 (experiment lists {self.expiry}).", file=sys.stderr)
            return False

        if not check_expiry:
            return True

        today = today or date.today()
        if expiry_date < today:
            print(f"WARNING: experiment {self.name} expired on {self.expiry}", file=sys.stderr)
        if expiry_date > today + timedelta(days=MAX_EXPIRY_DAYS):
            print(f"WARNING: experiment {self.name} expires far in the future on {self.expiry}",
                  file=sys.stderr)
            print("WARNING: expiry should be no more than two quarters from now", file=sys.stderr)

        return not self.error

    def add_rollout_specification(self, defaults, platforms_define, rollout):
        """
        Resolve the rollout into a default and constraint text per platform.

        Args:
            defaults: default token -> metadata expression; every stored
                token must be one of its keys
            platforms_define: platform -> preprocessor guard
            rollout: RolloutSpecification naming this experiment

        Returns: (success, error_messages)
        """
        if self.error:
            return False, [f"experiment {self.name} is invalid, not applying rollout"]
        if rollout.name != self.name:
            message = f"Rollout specification does not apply to this experiment: {self.name}"
            print(f"ERROR: {message}", file=sys.stderr)
            return False, [message]

        self._add_requirements(rollout.requirements)

        if not rollout.default_value and not rollout.platform_value:
            return self._fail(f"no default for experiment {rollout.name}")

        resolved = {}
        constraints = {}
        for platform in platforms_define:
            if rollout.default_value:
                value = rollout.default_value
            elif platform in rollout.platform_value:
                value = rollout.platform_value[platform]
            else:
                return self._fail(f"no value set for experiment {rollout.name} on platform {platform}")

            if self._requires:
                # Experiments with preconditions are only default-enabled in debug builds.
                value = DEBUG_DEFAULT
                constraints[platform] = ', '.join(self._requires)
            else:
                constraints[platform] = ''

            if value not in defaults:
                return self._fail(f"unknown default value '{value}' for experiment "
                                  f"{rollout.name} on platform {platform}")
            resolved[platform] = value

        self._defaults.update(resolved)
        self._additional_constraints.update(constraints)
        return True, []

    def __repr__(self):
        return f"ExperimentDefinition(name={self.name!r}, expiry={self.expiry!r}, error={self.error})"


def normalize_expiry(expiry):
    """YAML decodes bare dates; keep the YYYY-MM-DD text the catalogue used."""
    if isinstance(expiry, (date, datetime)):
        return expiry.strftime(EXPIRY_FORMAT)
    return expiry


def normalize_experiment_node(node):
    """Copy of a catalogue entry with its expiry restored to text, ready for schema checks."""
    if 'expiry' not in node:
        return node
    normalized = dict(node)
    normalized['expiry'] = normalize_expiry(node['expiry'])
    return normalized
