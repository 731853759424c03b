import inspect
import unittest

from _pytest.unittest import UnitTestCase
from testscenarios import WithScenarios


def pytest_pycollect_makeitem(collector, name, obj):
    # testscenarios multiplies tests inside TestCase.run, which pytest's
    # unittest runner does not support; expand each scenario into its own
    # TestCase subclass at collection time instead.
    if not (inspect.isclass(obj) and issubclass(obj, WithScenarios)
            and issubclass(obj, unittest.TestCase)):
        return None
    scenarios = getattr(obj, 'scenarios', None)
    if not scenarios:
        return None
    items = []
    for scenario_name, params in scenarios:
        attrs = dict(params)
        attrs['scenarios'] = None
        attrs['__module__'] = obj.__module__
        sub_name = '{0}[{1}]'.format(name, scenario_name)
        subclass = type(sub_name, (obj,), attrs)
        subclass.__qualname__ = sub_name
        setattr(collector.obj, sub_name, subclass)
        items.append(UnitTestCase.from_parent(
            collector, name=sub_name, obj=subclass))
    return items
