from unittest import TestCase


# ======================================================================

class TestIdealGas(TestCase):
    def test_molarity(self):
        from microbialkitchen import (calculate_ideal_gas_molarity, pressure,
                                      temperature, is_molarity_concentration)

        c = calculate_ideal_gas_molarity(pressure(1, 'atm'),
                                         temperature(0, 'C'))
        self.assertTrue(is_molarity_concentration(c))
        self.assertEqual(c.unit, 'M')
        self.assertAlmostEqual(c.values[0], 0.04462, places=4)

        # Same result for equivalent inputs in other units.
        c2 = calculate_ideal_gas_molarity(pressure(101.325, 'kPa'),
                                          temperature(273.15, 'K'))
        self.assertAlmostEqual(c2.values[0], c.values[0], places=12)

        c = calculate_ideal_gas_molarity(pressure([1, 2], 'bar'),
                                         temperature(0, 'C'))
        self.assertAlmostEqual(c.values[0], 0.04403, places=4)
        self.assertAlmostEqual(c.values[1] / c.values[0], 2.0, places=12)

    def test_amount(self):
        from microbialkitchen import (calculate_ideal_gas_amount, pressure,
                                      temperature, volume, is_amount)

        n = calculate_ideal_gas_amount(pressure(1, 'atm'),
                                       temperature(0, 'C'),
                                       volume(22.414, 'L'))
        self.assertTrue(is_amount(n))
        self.assertAlmostEqual(n.to_value('mol')[0], 1.0, places=3)

        n = calculate_ideal_gas_amount(pressure(1, 'atm'),
                                       temperature(0, 'C'),
                                       volume(100, 'mL'))
        self.assertAlmostEqual(n.to_value('mmol')[0], 4.4615, places=3)

    def test_wrong_kind(self):
        from microbialkitchen import (calculate_ideal_gas_molarity,
                                      calculate_ideal_gas_amount, quantity,
                                      pressure, temperature)
        from microbialkitchen.units.exception import WrongQuantityKindError

        with self.assertRaises(WrongQuantityKindError) as cm:
            calculate_ideal_gas_molarity(quantity(1, 'mM'),
                                         temperature(0, 'C'))
        self.assertIn("'pressure'", str(cm.exception))

        with self.assertRaises(WrongQuantityKindError):
            calculate_ideal_gas_molarity(pressure(1, 'bar'), 273.15)

        with self.assertRaises(WrongQuantityKindError) as cm:
            calculate_ideal_gas_amount(pressure(1, 'bar'),
                                       temperature(0, 'C'),
                                       quantity(1, 'g'))
        self.assertIn("'volume'", str(cm.exception))


# ----------------------------------------------------------------------

class TestGasSolubility(TestCase):
    def test_CO2(self):
        import warnings
        from microbialkitchen import (calculate_gas_solubility, temperature,
                                      is_gas_solubility)

        with warnings.catch_warnings():
            warnings.simplefilter('error')
            KH = calculate_gas_solubility('CO2', temperature(25, 'C'))
        self.assertTrue(is_gas_solubility(KH))
        self.assertEqual(KH.unit, 'M/bar')
        self.assertAlmostEqual(KH.values[0], 0.033, places=12)

        # CO2 is more soluble in colder water.
        KH = calculate_gas_solubility('CO2', temperature([5, 25, 40], 'C'))
        self.assertGreater(KH.values[0], KH.values[1])
        self.assertGreater(KH.values[1], KH.values[2])

        # Van't Hoff temperature dependence.
        KH = calculate_gas_solubility('CO2', temperature(310.15, 'K'))
        self.assertAlmostEqual(KH.values[0], 0.033 * 0.7323, places=4)

    def test_out_of_range(self):
        from microbialkitchen import calculate_gas_solubility, temperature

        with self.assertWarns(UserWarning):
            KH = calculate_gas_solubility('CO2', temperature([25, 120], 'C'))
        self.assertEqual(len(KH), 2)

    def test_errors(self):
        from microbialkitchen import (calculate_gas_solubility, temperature,
                                      quantity)
        from microbialkitchen.chemistry import (MissingConstantsError,
                                                AmbiguousConstantsError,
                                                get_gas_solubility_table)
        from microbialkitchen.units.exception import WrongQuantityKindError

        with self.assertRaises(ValueError):
            calculate_gas_solubility('', temperature(25, 'C'))

        with self.assertRaises(MissingConstantsError) as cm:
            calculate_gas_solubility('N2', temperature(25, 'C'))
        self.assertEqual(cm.exception.gas, 'N2')
        self.assertIn("'N2'", str(cm.exception))

        import pandas as pd
        table = get_gas_solubility_table()
        doubled = pd.concat([table, table], ignore_index=True)
        with self.assertRaises(AmbiguousConstantsError) as cm:
            calculate_gas_solubility('CO2', temperature(25, 'C'),
                                     constants=doubled)
        self.assertIn("'CO2'", str(cm.exception))

        with self.assertRaises(ValueError):
            calculate_gas_solubility('CO2', temperature(25, 'C'),
                                     constants=table[['gas', 'H0']])

        with self.assertRaises(WrongQuantityKindError):
            calculate_gas_solubility('CO2', quantity(1, 'bar'))

    def test_custom_table(self):
        import pandas as pd
        from microbialkitchen import calculate_gas_solubility, temperature
        from microbialkitchen.chemistry import get_gas_solubility_table

        table = get_gas_solubility_table()
        extra = pd.DataFrame({'gas': ['X'], 'H0': [1.5],
                              'vant_hoff_slope': [0.0], 'T0': [298.15]})
        table = pd.concat([table, extra], ignore_index=True)
        KH = calculate_gas_solubility('X', temperature(60, 'C'),
                                      constants=table)
        self.assertAlmostEqual(KH.values[0], 1.5, places=12)

        # The package table is unchanged.
        self.assertEqual(len(get_gas_solubility_table()), 1)


class TestConstants(TestCase):
    def test_get_constant(self):
        from microbialkitchen.chemistry import (get_constant, get_constants,
                                                MissingConstantsError)

        self.assertAlmostEqual(get_constant('pKa1_carbonic_acid'), 6.35)
        self.assertAlmostEqual(get_constant('pKw', {'pKw': 13.5}), 13.5)
        with self.assertRaises(MissingConstantsError) as cm:
            get_constant('pKa3')
        self.assertEqual(cm.exception.name, 'pKa3')

        consts = get_constants()
        consts['pKw'] = 0.0
        self.assertAlmostEqual(get_constant('pKw'), 14.0)
