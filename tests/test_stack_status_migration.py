#
# Copyright OpenSearch Contributors
# SPDX-License-Identifier: Apache-2.0
#
# The OpenSearch Contributors require contributions made to
# this file be licensed under the Apache-2.0 license or a
# compatible open source license.
#

import logging
import unittest
from unittest.mock import patch, MagicMock, ANY

import responses
from responses import matchers

import stack_status_migration as migration
from document_store import DocumentStoreClient
from endpoint_info import EndpointInfo
from exceptions import MappingUpdateError, SubmissionError
from migration_config import MigrationConfig, MonitorConfig, StacksConfig
from stack_status import STATUS_FIELD_SPECS, STATUS_SCRIPT
from stack_status_migration_params import StackStatusMigrationParams
from task_status import MigrationOutcome, OperationRequest
from tests import test_constants


def create_config() -> MigrationConfig:
    return MigrationConfig(EndpointInfo(test_constants.ENDPOINT),
                           StacksConfig(test_constants.INDEX_NAME, test_constants.ALIAS_NAME),
                           MonitorConfig(poll_interval_seconds=0))


class TestStackStatusMigration(unittest.TestCase):
    def setUp(self) -> None:
        logging.disable(logging.CRITICAL)

    def tearDown(self) -> None:
        logging.disable(logging.NOTSET)

    def test_build_request(self):
        config = create_config()
        config.stacks.query = {"term": {"is_deleted": False}}
        request = migration.build_request(config)
        self.assertEqual(OperationRequest(test_constants.ALIAS_NAME, STATUS_SCRIPT,
                                          query={"term": {"is_deleted": False}}), request)
        self.assertFalse(request.synchronous)

    def test_apply_overrides(self):
        config = migration.apply_overrides(create_config(),
                                           StackStatusMigrationParams("test", poll_interval_seconds=2,
                                                                      max_transient_failures=3, timeout_seconds=4))
        self.assertEqual(MonitorConfig(2, 3, 4), config.monitor)
        # Unset values keep the config file settings
        config = migration.apply_overrides(create_config(), StackStatusMigrationParams("test"))
        self.assertEqual(0, config.monitor.poll_interval_seconds)
        self.assertEqual(60, config.monitor.max_transient_failures)

    def test_apply_invalid_overrides(self):
        invalid_params = [StackStatusMigrationParams("test", poll_interval_seconds=0),
                          StackStatusMigrationParams("test", poll_interval_seconds=-1),
                          StackStatusMigrationParams("test", max_transient_failures=0),
                          StackStatusMigrationParams("test", timeout_seconds=-5)]
        for params in invalid_params:
            self.assertRaises(ValueError, migration.apply_overrides, create_config(), params)

    @patch('stack_status_migration.MappingUpdater')
    def test_migrate(self, mock_updater_class: MagicMock):
        mock_client = MagicMock()
        mock_monitor = MagicMock()
        expected_outcome = MigrationOutcome(10, 10, test_constants.TASK_ID)
        mock_monitor.await_completion.return_value = expected_outcome
        config = create_config()
        result = migration.migrate(mock_client, config, mock_monitor)
        self.assertEqual(expected_outcome, result)
        mock_updater_class.assert_called_once_with(mock_client)
        mock_updater_class.return_value.update.assert_called_once_with(test_constants.INDEX_NAME,
                                                                       STATUS_FIELD_SPECS)
        mock_monitor.submit.assert_called_once_with(migration.build_request(config))
        mock_monitor.await_completion.assert_called_once_with(mock_monitor.submit.return_value, ANY)

    @patch('stack_status_migration.MappingUpdater')
    def test_mapping_failure_aborts(self, mock_updater_class: MagicMock):
        mock_updater_class.return_value.update.side_effect = MappingUpdateError("conflict")
        mock_monitor = MagicMock()
        self.assertRaises(MappingUpdateError, migration.migrate, MagicMock(), create_config(), mock_monitor)
        # Nothing is submitted when the mapping cannot be updated
        mock_monitor.submit.assert_not_called()
        mock_monitor.await_completion.assert_not_called()

    @patch('stack_status_migration.MappingUpdater')
    def test_submission_failure(self, mock_updater_class: MagicMock):
        mock_monitor = MagicMock()
        mock_monitor.submit.side_effect = SubmissionError("rejected")
        self.assertRaises(SubmissionError, migration.migrate, MagicMock(), create_config(), mock_monitor)
        mock_monitor.await_completion.assert_not_called()

    @responses.activate
    def test_migrate_against_cluster(self):
        responses.get(test_constants.MAPPING_URL, json=test_constants.EXISTING_MAPPING)
        responses.put(test_constants.MAPPING_URL, json={"acknowledged": True})
        responses.post(test_constants.REFRESH_URL, json={})
        expected_body = {"script": {"source": STATUS_SCRIPT, "lang": "painless"}}
        responses.post(test_constants.UPDATE_BY_QUERY_URL, json={"task": test_constants.TASK_ID},
                       match=[matchers.json_params_matcher(expected_body),
                              matchers.query_param_matcher({"wait_for_completion": "false"})])
        responses.get(test_constants.TASK_URL, json=test_constants.create_task_response(False, updated=0, total=7))
        responses.get(test_constants.TASK_URL, json=test_constants.create_task_response(True, updated=7, total=7))
        config = create_config()
        outcome = migration.migrate(DocumentStoreClient(config.endpoint), config)
        self.assertEqual(7, outcome.updated_count)
        self.assertEqual(6, len(responses.calls))

    @responses.activate
    def test_mapping_rejected_against_cluster(self):
        responses.get(test_constants.MAPPING_URL, json=test_constants.EXISTING_MAPPING)
        responses.put(test_constants.MAPPING_URL, status=400, json={"error": "mapper_parsing_exception"})
        config = create_config()
        self.assertRaises(MappingUpdateError, migration.migrate, DocumentStoreClient(config.endpoint), config)
        # No update-by-query call was attempted
        self.assertFalse(any("_update_by_query" in call.request.url for call in responses.calls))

    @patch('stack_status_migration.migrate')
    @patch('stack_status_migration.print_report')
    @patch('migration_config.load_config')
    # Note that mock objects are passed bottom-up from the patch order above
    def test_run_dryrun(self, mock_load: MagicMock, mock_report: MagicMock, mock_migrate: MagicMock):
        mock_load.return_value = create_config()
        result = migration.run(StackStatusMigrationParams("test_config", dryrun=True))
        self.assertIsNone(result)
        mock_load.assert_called_once_with("test_config")
        mock_report.assert_called_once()
        mock_migrate.assert_not_called()

    @patch('stack_status_migration.migrate')
    @patch('migration_config.load_config')
    # Note that mock objects are passed bottom-up from the patch order above
    def test_run(self, mock_load: MagicMock, mock_migrate: MagicMock):
        config = create_config()
        mock_load.return_value = config
        expected_outcome = MigrationOutcome(5)
        mock_migrate.return_value = expected_outcome
        result = migration.run(StackStatusMigrationParams("test_config", timeout_seconds=30))
        self.assertEqual(expected_outcome, result)
        self.assertEqual(30, config.monitor.timeout_seconds)
        mock_migrate.assert_called_once_with(ANY, config)
        self.assertEqual(config.endpoint, mock_migrate.call_args[0][0].get_endpoint())


if __name__ == '__main__':
    unittest.main()
