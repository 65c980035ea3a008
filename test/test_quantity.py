from unittest import TestCase


# ======================================================================

class TestQuantity(TestCase):
    def test___init__(self):
        import numpy as np
        from microbialkitchen.units import Quantity, quantity, UnitKind
        from microbialkitchen.units.exception import UnknownUnitError

        # Scalars are length-1 quantities.
        q = quantity(10, 'mM')
        self.assertEqual(len(q), 1)
        self.assertEqual(q.unit, 'mM')
        self.assertIs(q.kind, UnitKind.MOLARITY)
        self.assertEqual(q.values.tolist(), [10.0])

        # Values are copied and read-only.
        raw = np.array([1.0, 2.0, 3.0])
        q = Quantity(raw, 'mL')
        raw[0] = 99.0
        self.assertEqual(q.values[0], 1.0)
        with self.assertRaises(ValueError):
            q.values[0] = 5.0

        # Missing values.
        q = quantity([1, None, np.nan], 'L')
        self.assertEqual(q.is_na().tolist(), [False, True, True])

        # Plain values are dimensionless.
        self.assertIs(quantity(0.5).kind, UnitKind.DIMENSIONLESS)

        # Alias symbols are canonicalised.
        self.assertEqual(quantity(1, 'uM').unit, 'µM')

        with self.assertRaises(UnknownUnitError):
            quantity(1, 'mmM')
        with self.assertRaises(TypeError):
            quantity('10', 'mM')
        with self.assertRaises(TypeError):
            quantity([1 + 2j], 'mM')
        with self.assertRaises(ValueError):
            quantity([[1, 2], [3, 4]], 'mM')

    def test_convert(self):
        from microbialkitchen.units import quantity, convert_quantity
        from microbialkitchen.units.exception import IncompatibleUnitError

        q = quantity([1, 2], 'mM')
        q_uM = q.convert('µM')
        self.assertEqual(q_uM.unit, 'µM')
        self.assertAlmostEqual(q_uM.values[1], 2000.0)
        self.assertEqual(q.unit, 'mM')  # Original unchanged.

        # Quantity passed to quantity() with a unit is converted.
        self.assertAlmostEqual(quantity(q, 'M').values[0], 0.001)
        self.assertIs(quantity(q), q)

        self.assertEqual(quantity(0, 'C').convert('K').values[0], 273.15)
        self.assertTrue((convert_quantity(q, 'M').convert('mM') == q).all())

        with self.assertRaises(IncompatibleUnitError):
            q.convert('bar')

    def test_extract_value(self):
        from microbialkitchen.units import quantity, extract_value

        q = quantity([1, 2], 'mM')
        values = extract_value(q, 'M')
        self.assertAlmostEqual(values[0], 0.001)
        values[0] = 10.0  # Copy is writable and independent.
        self.assertEqual(q.values[0], 1.0)
        self.assertEqual(extract_value(q).tolist(), [1.0, 2.0])

        with self.assertRaises(TypeError):
            extract_value([1, 2], 'M')

    def test_no_implicit_coercion(self):
        import numpy as np
        from microbialkitchen.units import quantity

        q = quantity([1, 2], 'mM')
        with self.assertRaises(TypeError):
            np.asarray(q)
        with self.assertRaises(TypeError):
            float(quantity(1, 'mM'))
        with self.assertRaises(TypeError):
            bool(q)

    def test___hash__(self):
        from microbialkitchen.units import quantity

        # Equal quantities hash alike across units.
        self.assertEqual(hash(quantity(1, 'mM')),
                         hash(quantity(0.001, 'M')))
        self.assertEqual(hash(quantity(3, 'mM')),
                         hash(quantity(0.003, 'M').convert('µM')))
        self.assertEqual(hash(quantity(0.5)), hash(0.5))
        keys = {quantity(2, 'mM'): 'b'}
        self.assertEqual(keys[quantity(0.002, 'M')], 'b')
        self.assertNotIn(quantity(2, 'bar'), keys)
        self.assertNotIn(quantity(2.5, 'mM'), keys)

    def test___add__(self):
        # Also tests __radd__, __sub__, __rsub__.
        import numpy as np
        from microbialkitchen.units import quantity
        from microbialkitchen.units.exception import IncompatibleUnitError

        # Right operand is converted to the left unit.
        x = quantity(10, 'mM') + quantity(0.5, 'M')
        self.assertEqual(x.unit, 'mM')
        self.assertAlmostEqual(x.values[0], 510.0)

        x = quantity(1, 'L') - quantity([100, 200], 'mL')
        self.assertEqual(x.unit, 'L')
        self.assertTrue(np.allclose(x.values, [0.9, 0.8]))

        with self.assertRaises(IncompatibleUnitError):
            quantity(1, 'mM') + quantity(1, 'bar')
        with self.assertRaises(IncompatibleUnitError):
            quantity(1, 'mM') + 1
        with self.assertRaises(IncompatibleUnitError):
            1 - quantity(1, 'mM')

        # Plain numbers only combine with dimensionless quantities.
        x = 1 - quantity(0.25)
        self.assertEqual(x.values[0], 0.75)
        x = quantity([1, 2]) + np.array([1, 1])
        self.assertEqual(x.values.tolist(), [2.0, 3.0])

    def test___mul__(self):
        # Also tests __truediv__ and reflected versions.
        import numpy as np
        from microbialkitchen.units import (quantity, molarity_concentration,
                                            UnitKind)
        from microbialkitchen.units.exception import (
            UnsupportedOperationError)

        # Scaling keeps unit and derived kind.
        c = molarity_concentration([1, 2], 'mM')
        x = 2 * c
        self.assertEqual(x.unit, 'mM')
        self.assertIs(x.subkind, c.subkind)
        self.assertEqual(x.values.tolist(), [2.0, 4.0])
        x = c / 4
        self.assertEqual(x.values.tolist(), [0.25, 0.5])
        x = c * np.array([1.0, 0.5])
        self.assertEqual(x.values.tolist(), [1.0, 1.0])
        x = c * quantity(3)
        self.assertEqual(x.unit, 'mM')
        self.assertEqual(x.values.tolist(), [3.0, 6.0])

        # Molarity x volume -> amount, in base units.
        n = quantity(10, 'mM') * quantity(250, 'mL')
        self.assertIs(n.kind, UnitKind.AMOUNT)
        self.assertEqual(n.unit, 'mol')
        self.assertAlmostEqual(n.values[0], 0.0025)
        n = quantity(250, 'mL') * quantity(10, 'mM')
        self.assertAlmostEqual(n.values[0], 0.0025)

        # Solubility x pressure -> molarity.
        c = quantity(33, 'mM/bar') * quantity(2, 'bar')
        self.assertIs(c.kind, UnitKind.MOLARITY)
        self.assertAlmostEqual(c.values[0], 0.066)

        # Quotients.
        c = quantity(5, 'mmol') / quantity(500, 'mL')
        self.assertEqual(c.unit, 'M')
        self.assertAlmostEqual(c.values[0], 0.01)
        mw = quantity(44.01, 'g') / quantity(1, 'mol')
        self.assertIs(mw.kind, UnitKind.MOLECULAR_WEIGHT)
        kh = quantity(33, 'mM') / quantity(1, 'bar')
        self.assertEqual(kh.unit, 'M/bar')
        self.assertAlmostEqual(kh.values[0], 0.033)

        # Same kind gives a dimensionless ratio.
        r = quantity(1, 'M') / quantity(10, 'mM')
        self.assertIs(r.kind, UnitKind.DIMENSIONLESS)
        self.assertAlmostEqual(r.values[0], 100.0)

        with self.assertRaises(UnsupportedOperationError):
            quantity(1, 'mM') * quantity(1, 'mM')
        with self.assertRaises(UnsupportedOperationError):
            quantity(1, 'K') * quantity(1, 'bar')
        with self.assertRaises(UnsupportedOperationError):
            quantity(1, 'L') / quantity(1, 'bar')
        with self.assertRaises(UnsupportedOperationError):
            1 / quantity(2, 'L')

    def test_unary(self):
        from microbialkitchen.units import quantity

        q = quantity([-1, 2], 'mM')
        self.assertEqual((-q).values.tolist(), [1.0, -2.0])
        self.assertEqual(abs(q).values.tolist(), [1.0, 2.0])
        self.assertEqual((+q).unit, 'mM')

    def test_offset_temperature(self):
        from microbialkitchen.units import quantity, temperature
        from microbialkitchen.units.exception import (
            UnsupportedOperationError)

        with self.assertRaises(UnsupportedOperationError):
            temperature(20, 'C') + temperature(10, 'K')
        with self.assertRaises(UnsupportedOperationError):
            temperature(300, 'K') + temperature(10, 'C')
        with self.assertRaises(UnsupportedOperationError):
            temperature(30, 'C') - temperature(20, 'C')
        with self.assertRaises(UnsupportedOperationError):
            temperature(25, 'C') * 2
        with self.assertRaises(UnsupportedOperationError):
            2 * temperature(77, 'F')
        with self.assertRaises(UnsupportedOperationError):
            temperature(25, 'C') / 2
        with self.assertRaises(UnsupportedOperationError):
            quantity(0.5) * temperature(25, 'C')
        with self.assertRaises(UnsupportedOperationError):
            -temperature(5, 'C')
        with self.assertRaises(UnsupportedOperationError):
            quantity([10, 20], 'C').sum()
        with self.assertRaises(UnsupportedOperationError):
            quantity([10, 20], 'C').std()

        # Absolute temperatures and order statistics are fine.
        t = temperature(300, 'K') + temperature(10, 'K')
        self.assertEqual(t.unit, 'K')
        self.assertAlmostEqual(t.values[0], 310.0)
        t = temperature(25, 'C').convert('K') * 2
        self.assertAlmostEqual(t.values[0], 596.3)
        q = quantity([10, 20], 'C')
        self.assertAlmostEqual(q.mean().values[0], 15.0)
        self.assertEqual(q.max().values[0], 20.0)
        r = temperature(50, 'C') / temperature(25, 'C')
        self.assertAlmostEqual(r.values[0], 323.15 / 298.15)

    def test_comparison(self):
        from microbialkitchen.units import quantity
        from microbialkitchen.units.exception import IncompatibleUnitError

        q = quantity([1, 2, 3], 'mM')
        self.assertEqual((q > quantity(0.0015, 'M')).tolist(),
                         [False, True, True])
        self.assertEqual((q <= quantity(2000, 'µM')).tolist(),
                         [True, True, False])
        self.assertEqual((q == quantity(0.002, 'M')).tolist(),
                         [False, True, False])
        self.assertEqual((q != quantity(2, 'mM')).tolist(),
                         [True, False, True])
        self.assertTrue((quantity(25, 'C') > quantity(290, 'K')).all())

        with self.assertRaises(IncompatibleUnitError):
            q < quantity(1, 'bar')
        with self.assertRaises(IncompatibleUnitError):
            q > 0

    def test_indexing(self):
        from microbialkitchen.units import quantity

        q = quantity([1, 2, 3], 'mM')
        self.assertEqual(len(q[0]), 1)
        self.assertEqual(q[-1].values[0], 3.0)
        self.assertEqual(q[1:].values.tolist(), [2.0, 3.0])
        self.assertEqual(q[q > quantity(1.5, 'mM')].values.tolist(),
                         [2.0, 3.0])
        self.assertEqual([x.values[0] for x in q], [1.0, 2.0, 3.0])
        with self.assertRaises(IndexError):
            q[3]

    def test_reductions(self):
        from microbialkitchen.units import quantity

        q = quantity([1, 2, None, 5], 'mM')
        self.assertEqual(q.sum().values[0], 8.0)
        self.assertEqual(q.sum().unit, 'mM')
        self.assertAlmostEqual(q.mean().values[0], 8 / 3)
        self.assertEqual(q.median().values[0], 2.0)
        self.assertEqual(q.min().values[0], 1.0)
        self.assertEqual(q.max().values[0], 5.0)
        self.assertAlmostEqual(q.std().values[0], 2.081665999466133)
        self.assertTrue(q.sum(skipna=False).is_na()[0])
        self.assertEqual(quantity([], 'mM').sum().values[0], 0.0)
        self.assertTrue(quantity([], 'mM').mean().is_na()[0])

    def test_auto_scale(self):
        from microbialkitchen.units import (quantity, auto_scale, best_unit,
                                            gas_pressure)

        self.assertEqual(best_unit(quantity(0.0446, 'M')), 'mM')
        self.assertEqual(best_unit(quantity([2000, 4000], 'nM')), 'µM')
        self.assertEqual(best_unit(quantity(5000, 'Pa')), 'kPa')
        self.assertEqual(best_unit(quantity(1e-20, 'M')), 'fM')
        self.assertEqual(best_unit(quantity(0, 'mM')), 'mM')
        self.assertEqual(best_unit(quantity(25, 'C')), 'C')
        self.assertEqual(best_unit(quantity(1500, 'mbar')), 'bar')

        # Derived kinds only scale to allowed units.
        self.assertEqual(best_unit(gas_pressure(5e6, 'Pa')), 'kPa')

        # Idempotent.
        for q in [quantity([0.0012, 0.0034], 'M'), quantity(999.9, 'mL'),
                  quantity(1000, 'mL'), quantity(-0.5, 'mol')]:
            once = auto_scale(q)
            twice = auto_scale(once)
            self.assertEqual(once.unit, twice.unit)
            self.assertTrue((twice == q).all())

        # Stored values of the original are unchanged.
        q = quantity(0.0446, 'M')
        auto_scale(q)
        self.assertEqual(q.unit, 'M')

    def test_format(self):
        from microbialkitchen import options
        from microbialkitchen.units import quantity, format_quantity

        self.assertEqual(str(quantity(10, 'mM')), '10 mM')
        self.assertEqual(str(quantity([1, 2.5], 'mM')), '[1, 2.5] mM')
        self.assertEqual(str(quantity(0.5)), '0.5')
        self.assertEqual(format_quantity(quantity([1, None], 'L')),
                         ['1 L', 'NaN'])
        self.assertEqual(format_quantity(quantity(0.0025, 'M'),
                                         auto_scale=True), ['2.5 mM'])
        self.assertEqual(f"{quantity(1.2345, 'bar'):.2f}", '1.23 bar')
        self.assertEqual(repr(quantity([1, 2], 'mM')),
                         "Quantity([1.0, 2.0], 'mM')")
        with options(format_spec='.1f'):
            self.assertEqual(str(quantity(3, 'K')), '3.0 K')
        self.assertEqual(str(quantity(3, 'K')), '3 K')

    def test_combine_quantities(self):
        from microbialkitchen.units import (quantity, combine_quantities,
                                            molarity_concentration)
        from microbialkitchen.units.exception import IncompatibleUnitError

        q = combine_quantities([quantity(1, 'mM'), quantity([0.002, 0.003],
                                                            'M')])
        self.assertEqual(q.unit, 'mM')
        self.assertAlmostEqual(q.sum().values[0], 6.0)

        q = combine_quantities([molarity_concentration(1, 'mM'),
                                molarity_concentration(2, 'mM')])
        self.assertIsNotNone(q.subkind)

        with self.assertRaises(IncompatibleUnitError) as cm:
            combine_quantities([quantity(1, 'mM'), quantity(1, 'bar')])
        self.assertIn('molarity', str(cm.exception))
        self.assertIn('pressure', str(cm.exception))
        with self.assertRaises(ValueError):
            combine_quantities([])
