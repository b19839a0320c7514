import threading

from django.db import connection
from django.test import TransactionTestCase, override_settings

from dispatches.models import DispatchSequence
from dispatches.services.numbering import next_dispatch_number

WORKERS = 8


@override_settings(DISPATCH_NUMBER_MAX_ATTEMPTS=20, DISPATCH_NUMBER_RETRY_DELAY_SECONDS=0.01)
class ConcurrentDispatchNumberTest(TransactionTestCase):
    """Numbers handed out from several threads at once, each on its own connection."""

    def _run_workers(self, year):
        barrier = threading.Barrier(WORKERS)
        issued, errors = [], []
        lock = threading.Lock()

        def worker():
            try:
                barrier.wait()
                number = next_dispatch_number(year)
                with lock:
                    issued.append(number)
            except Exception as exc:  # collected and asserted on below
                with lock:
                    errors.append(exc)
            finally:
                connection.close()

        threads = [threading.Thread(target=worker) for _ in range(WORKERS)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        return issued, errors

    def test_database_is_shared_between_threads(self):
        self.assertNotEqual(connection.settings_dict['NAME'], ':memory:')

    def test_parallel_callers_get_distinct_consecutive_numbers(self):
        DispatchSequence.objects.create(year=2026, last_number=41)

        issued, errors = self._run_workers(2026)

        self.assertEqual(errors, [])
        self.assertEqual(sorted(n.sequence for n in issued), list(range(42, 42 + WORKERS)))
        self.assertEqual(len({str(n) for n in issued}), WORKERS)
        self.assertEqual(DispatchSequence.objects.get(year=2026).last_number, 41 + WORKERS)

    def test_parallel_first_numbers_of_a_year(self):
        issued, errors = self._run_workers(2031)

        self.assertEqual(errors, [])
        self.assertEqual(sorted(n.sequence for n in issued), list(range(1, 1 + WORKERS)))
        self.assertEqual(DispatchSequence.objects.filter(year=2031).count(), 1)
