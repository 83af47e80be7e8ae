# -*- coding: utf-8 -*-
"""
Propagation of a changed backend value to swarm.

Swarm secrets are immutable so a change is rolled out as a new secret object

create    - a copy of the live secret named <name>-<unix timestamp> holding the new value
            and the labels of the live secret, marked with vault.secret.rotated.from=<name>
propagate - every service referencing the live secret (or an earlier copy of it) is
            repointed at the copy and stamped with a rotation label so swarm
            reschedules its tasks
cleanup   - only once every service is updated the superseded secret is removed

If any service update fails the copy is removed again and the rotation reported as
failed. Services updated before the failure keep pointing at the copy, they are
picked up again on the next detected change because earlier copies count as
references of the logical secret. Only secrets carrying that marker count as
copies, an unrelated secret that happens to be named <name>-<digits> is left alone.
"""

import logging
import re
import time

from .exceptions import CleanupError, \
    NewSecretCreateError, \
    OrchestratorError, \
    PropagationError, \
    RotationError, \
    SecretObjectNotFound, \
    SecretProviderError
from .orchestrator import secret_created_at
from .tracker import fingerprint

ROTATION_LABEL = "vault.secret.rotated"
ROTATED_FROM_LABEL = "vault.secret.rotated.from"


def version_suffix(secret_name, name):
    """Numeric suffix if secret_name has the form <name>-<digits>, else None."""
    match = re.fullmatch(re.escape(name) + r"-([0-9]+)", secret_name)
    if match:
        return int(match.group(1))
    return None


def is_rotated_copy(secret, name):
    """True if the swarm secret is a copy this driver created for name."""
    labels = secret["Spec"].get("Labels") or {}
    return labels.get(ROTATED_FROM_LABEL) == name and \
        version_suffix(secret["Spec"]["Name"], name) is not None


def next_version_name(name, existing_names, now=None):
    """
    Name for the next copy of a secret, the suffix strictly increases
    :param name: logical secret name
    :param existing_names: names of the swarm secrets that exist now
    :param now: unix timestamp, defaults to the current time
    :return: str
    """
    suffix = int(now if now is not None else time.time())
    for existing in existing_names:
        existing_suffix = version_suffix(existing, name)
        if existing_suffix is not None and existing_suffix >= suffix:
            suffix = existing_suffix + 1
    return f"{name}-{suffix}"


class SecretRotator:
    """Runs the create, propagate, cleanup sequence for one tracked secret.

    Attributes:
        provider (SecretsProvider): Where new values are read from.
        tracker (SecretTracker): Updated once a rotation has completed.
        orchestrator (SwarmClient): The swarm secret and service api.
    """

    def __init__(self, provider, tracker, orchestrator):
        self._provider = provider
        self._tracker = tracker
        self._orchestrator = orchestrator

    @property
    def provider(self):
        return self._provider

    @property
    def tracker(self):
        return self._tracker

    @property
    def orchestrator(self):
        return self._orchestrator

    def rotate_secret(self, secret_info):
        """Move every consumer of a tracked secret onto a copy holding the new value.

        Args:
            secret_info (SecretInfo): A snapshot copy of the tracked entry.

        Returns:
            str: Name of the swarm secret now holding the value.

        Raises:
            RotationError: When the value can not be read, the copy can not be
                created or a service update fails. The superseded secret is never
                removed in that case.
        """
        name = secret_info.secret_name
        logging.getLogger(__name__).info(f"Starting rotation for secret: {name}")

        try:
            new_value = self.provider.fetch_field(secret_info.secret_path,
                                                  secret_info.secret_field)
        except SecretProviderError as e:
            raise RotationError(name, f"failed to read updated secret: {e}") from e

        try:
            secrets = self.orchestrator.list_secrets()
        except OrchestratorError as e:
            raise RotationError(name, e) from e

        existing = self._live_secret(secret_info, secrets)
        new_name = next_version_name(name, [s["Spec"]["Name"] for s in secrets])

        copy_labels = dict(existing["Spec"].get("Labels") or {})
        copy_labels[ROTATED_FROM_LABEL] = name

        try:
            new_id = self.orchestrator.create_secret(new_name,
                                                     new_value,
                                                     labels=copy_labels)
        except OrchestratorError as e:
            raise NewSecretCreateError(name, new_name, e) from e

        logging.getLogger(__name__).info(
            f"Created new version of secret {name} with name {new_name} and ID: {new_id}")

        stale = {s["Spec"]["Name"]: s["ID"] for s in secrets
                 if s["Spec"]["Name"] == name or is_rotated_copy(s, name)}
        stale[existing["Spec"]["Name"]] = existing["ID"]

        try:
            migrated_from = self.update_services(name, stale, new_name, new_id)
        except PropagationError:
            self._remove_new_secret(name, new_name, new_id)
            raise

        self.remove_superseded(name, existing, stale, migrated_from)

        self.tracker.update_after_rotation(name, fingerprint(new_value), current_secret_name=new_name)
        logging.getLogger(__name__).info(f"Successfully rotated secret: {name} -> {new_name}")
        return new_name

    def _live_secret(self, secret_info, secrets):
        by_name = {s["Spec"]["Name"]: s for s in secrets}
        existing = by_name.get(secret_info.current_secret_name) or by_name.get(
            secret_info.secret_name)
        if existing:
            return existing

        # the tracker may have been rebuilt since the last rotation, use the newest copy
        copies = [s for s in secrets if is_rotated_copy(s, secret_info.secret_name)]
        if not copies:
            raise SecretObjectNotFound(secret_info.secret_name, secret_info.current_secret_name)
        return max(copies, key=lambda s: (secret_created_at(s) is not None,
                                          secret_created_at(s),
                                          version_suffix(s["Spec"]["Name"],
                                                         secret_info.secret_name)))

    def update_services(self, name, stale, new_name, new_id):
        """Repoint every service referencing a stale secret name.

        Args:
            name (str): The logical secret name, used for errors.
            stale (dict): Swarm secret name to id of the secrets being replaced.
            new_name (str): Name of the copy.
            new_id (str): Id of the copy.

        Returns:
            set: Names of the stale secrets services were moved off.

        Raises:
            PropagationError: On the first service update that fails.
        """
        try:
            services = self.orchestrator.list_services()
        except OrchestratorError as e:
            raise PropagationError(name, "*", e) from e

        updated_services = []
        migrated_from = set()
        for service in services:
            spec = service["Spec"]
            container_spec = spec.get("TaskTemplate", {}).get("ContainerSpec", {})
            secret_refs = container_spec.get("Secrets") or []

            needs_update = False
            updated_refs = []
            for secret_ref in secret_refs:
                if secret_ref.get("SecretName") in stale:
                    migrated_from.add(secret_ref["SecretName"])
                    secret_ref = dict(secret_ref, SecretID=new_id, SecretName=new_name)
                    needs_update = True
                updated_refs.append(secret_ref)

            if not needs_update:
                continue

            new_spec = dict(spec)
            new_spec["TaskTemplate"] = dict(spec["TaskTemplate"])
            new_spec["TaskTemplate"]["ContainerSpec"] = dict(container_spec, Secrets=updated_refs)
            new_spec["Labels"] = dict(spec.get("Labels") or {})
            new_spec["Labels"][ROTATION_LABEL] = str(int(time.time()))

            service_name = spec.get("Name", service["ID"])
            try:
                self.orchestrator.update_service(service["ID"],
                                                 service["Version"]["Index"],
                                                 new_spec)
            except OrchestratorError as e:
                logging.getLogger(__name__).error(
                    f"Failed to update service {service_name} to use {new_name}: {e}")
                raise PropagationError(name, service_name, e) from e

            updated_services.append(service_name)

        if updated_services:
            logging.getLogger(__name__).info(
                f"Updated services to use new secret {new_name}: {updated_services}")
        return migrated_from

    def _remove_new_secret(self, name, new_name, new_id):
        try:
            self.orchestrator.remove_secret(new_id)
            logging.getLogger(__name__).warning(
                f"Removed {new_name} after failed rotation of {name}")
        except OrchestratorError as e:
            # services updated before the failure still reference it
            logging.getLogger(__name__).error(
                f"Failed to remove {new_name} after failed rotation of {name}: {e}")

    def remove_superseded(self, name, existing, stale, migrated_from):
        """Remove the replaced secret and copies services were moved off, never fails."""
        to_remove = [(existing["Spec"]["Name"], existing["ID"])]
        for stale_name in sorted(migrated_from):
            if stale_name != existing["Spec"]["Name"]:
                to_remove.append((stale_name, stale[stale_name]))

        for secret_name, secret_id in to_remove:
            try:
                self.orchestrator.remove_secret(secret_id)
            except OrchestratorError as e:
                logging.getLogger(__name__).warning(str(CleanupError(secret_name, secret_id, e)))
