"""
stepwise - compose state transitions out of small named pieces.

An ``Update`` turns a state into a new state plus an ordered list of
effect descriptors; ``Sequence`` drives multi-step flows one event at a
time; ``Lifter`` focuses either on part of a larger state. Nothing here
performs I/O: effects are returned to the caller to execute.

Example:
    >>> from stepwise import update as U
    >>> U.run(U.modify(lambda n: n * 2).then(U.push(lambda n: n)), 21)
    (42, [42])
"""

from stepwise import lifter, sequence, update
from stepwise._vendor import NOTHING, Err, Maybe, Nothing, Ok, Result, Some
from stepwise.effects import ResolveEffect
from stepwise.errors import DispatchLimitError, LensLawError
from stepwise.host import Host
from stepwise.lifter import Lifter
from stepwise.sequence import Fail, Model, Msg, Outcome, Sequence, Succeed, resolve
from stepwise.update import Update, run

__all__ = [
    "NOTHING",
    "DispatchLimitError",
    "Err",
    "Fail",
    "Host",
    "LensLawError",
    "Lifter",
    "Maybe",
    "Model",
    "Msg",
    "Nothing",
    "Ok",
    "Outcome",
    "ResolveEffect",
    "Result",
    "Sequence",
    "Some",
    "Succeed",
    "Update",
    "lifter",
    "resolve",
    "run",
    "sequence",
    "update",
]
