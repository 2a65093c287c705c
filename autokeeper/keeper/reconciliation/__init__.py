from .preconditions import check_register_preconditions as check_register_preconditions
from .reconciliation_driver import ReconciliationDriver as ReconciliationDriver
