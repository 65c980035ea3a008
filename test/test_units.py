from unittest import TestCase


# ======================================================================

class TestRegistry(TestCase):
    def test_lookup(self):
        from microbialkitchen.units import lookup, kind_of, UnitKind
        from microbialkitchen.units.exception import UnknownUnitError

        defn = lookup('mM')
        self.assertEqual(defn.symbol, 'mM')
        self.assertIs(defn.kind, UnitKind.MOLARITY)
        self.assertEqual(defn.stem, 'M')
        self.assertAlmostEqual(defn.factor, 1e-3)
        self.assertIs(kind_of('kPa'), UnitKind.PRESSURE)
        self.assertIs(kind_of('M/atm'), UnitKind.SOLUBILITY)
        self.assertIs(kind_of(''), UnitKind.DIMENSIONLESS)

        # Micro and degree aliases resolve to the canonical symbol.
        self.assertEqual(lookup('uM').symbol, 'µM')
        self.assertEqual(lookup('μM').symbol, 'µM')
        self.assertEqual(lookup('°C').symbol, 'C')

        with self.assertRaises(UnknownUnitError) as cm:
            lookup('mMol')
        self.assertIn('mMol', str(cm.exception))
        self.assertEqual(cm.exception.units, ('mMol',))

    def test_convert(self):
        from microbialkitchen.units import convert
        from microbialkitchen.units.exception import IncompatibleUnitError

        self.assertAlmostEqual(convert(1, 'M', 'mM'), 1000.0)
        self.assertAlmostEqual(convert(250, 'mL', 'L'), 0.25)
        self.assertAlmostEqual(convert(1, 'atm', 'kPa'), 101.325)
        self.assertAlmostEqual(convert(760, 'Torr', 'atm'), 1.0)
        self.assertAlmostEqual(convert(1, 'mM/bar', 'M/bar'), 1e-3)
        self.assertAlmostEqual(convert(1.01325, 'M/atm', 'M/bar'), 1.0)

        # Arrays are converted elementwise.
        result = convert([1, 2, 3], 'mg', 'g')
        for got, exp in zip(result, [0.001, 0.002, 0.003]):
            self.assertAlmostEqual(got, exp)

        with self.assertRaises(IncompatibleUnitError) as cm:
            convert(1, 'mM', 'bar')
        self.assertIn("'mM'", str(cm.exception))
        self.assertIn("'bar'", str(cm.exception))

    def test_round_trip(self):
        from microbialkitchen.units import (convert, DEFAULT_REGISTRY,
                                            UnitKind)

        for kind in UnitKind:
            units = DEFAULT_REGISTRY.units_of(kind)
            for u1 in units:
                for u2 in units:
                    x = convert(convert(3.7, u1, u2), u2, u1)
                    self.assertAlmostEqual(x / 3.7, 1.0, places=12,
                                           msg=f"{u1} <-> {u2}")

    def test_temperature(self):
        from microbialkitchen.units import convert

        self.assertEqual(convert(0, 'C', 'K'), 273.15)
        self.assertAlmostEqual(convert(273.15, 'K', 'C'), 0.0)
        self.assertAlmostEqual(convert(212, 'F', 'C'), 100.0)
        self.assertAlmostEqual(convert(-40, 'C', 'F'), -40.0)
        self.assertAlmostEqual(convert(25, '°C', 'K'), 298.15)

    def test_family(self):
        from microbialkitchen.units import DEFAULT_REGISTRY

        family = [d.symbol for d in DEFAULT_REGISTRY.family('mM')]
        self.assertEqual(family, ['fM', 'pM', 'nM', 'µM', 'mM', 'M'])
        family = [d.symbol for d in DEFAULT_REGISTRY.family('kPa')]
        self.assertEqual(family, ['Pa', 'hPa', 'kPa', 'MPa', 'GPa'])
        self.assertEqual([d.symbol for d in DEFAULT_REGISTRY.family('C')],
                         ['C'])

    def test_locked(self):
        from microbialkitchen.units import DEFAULT_REGISTRY, UnitKind
        from microbialkitchen.units.exception import RegistryLockedError

        self.assertTrue(DEFAULT_REGISTRY.locked)
        with self.assertRaises(RegistryLockedError):
            DEFAULT_REGISTRY.add_unit('cL', UnitKind.VOLUME, 0.01)
        self.assertNotIn('cL', DEFAULT_REGISTRY)

    def test_custom_registry(self):
        from microbialkitchen.units import (DEFAULT_REGISTRY, UnitKind,
                                            UnitRegistry)

        reg = DEFAULT_REGISTRY.copy()
        self.assertFalse(reg.locked)
        reg.add_unit('gal', UnitKind.VOLUME, 3.785411784)
        self.assertAlmostEqual(reg.convert(1, 'gal', 'mL'), 3785.411784,
                               places=6)
        self.assertNotIn('gal', DEFAULT_REGISTRY)

        # A fresh registry needs a base unit before other units.
        reg = UnitRegistry()
        with self.assertRaises(ValueError):
            reg.add_unit('mL', UnitKind.VOLUME, 1e-3)
        reg.set_base_unit('L', UnitKind.VOLUME)
        reg.add_metric_units(UnitKind.VOLUME, 'L', prefixes=['m', ''])
        self.assertEqual(reg.units_of(UnitKind.VOLUME), ['L', 'mL'])

        # Only temperatures may use an offset scale.
        with self.assertRaises(ValueError):
            reg.add_unit('xL', UnitKind.VOLUME, None)

        reg.lock()
        with reg.unlocked():
            reg.add_unit('dL', UnitKind.VOLUME, 0.1)
        self.assertTrue(reg.locked)
        self.assertAlmostEqual(reg.convert(1, 'dL', 'mL'), 100.0)
