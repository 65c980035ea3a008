from unittest import TestCase


class TestOptions(TestCase):
    def test_set_options(self):
        from microbialkitchen import (get_options, set_options, quantity)

        defaults = get_options()
        self.assertEqual(defaults.format_spec, 'g')
        self.assertEqual(defaults.ph_bounds, (0.0, 14.0))
        self.assertEqual(defaults.ph_xtol, 1e-12)
        self.assertEqual(defaults.ph_maxiter, 100)

        try:
            set_options(format_spec='.2f')
            self.assertEqual(str(quantity(1.2345, 'mM')), '1.23 mM')
            self.assertEqual(get_options().format_spec, '.2f')
        finally:
            set_options(format_spec='g')
        self.assertEqual(str(quantity(1.5, 'mM')), '1.5 mM')

    def test_invalid(self):
        from microbialkitchen import get_options, set_options

        before = get_options()
        with self.assertRaises(ValueError):
            set_options(ph_bounds=(14.0, 0.0))
        with self.assertRaises(ValueError):
            set_options(ph_xtol=0.0)
        with self.assertRaises(ValueError):
            set_options(ph_maxiter=0)
        with self.assertRaises(ValueError):
            set_options(format_spec='q')
        with self.assertRaises(TypeError):
            set_options(not_an_option=1)
        self.assertEqual(get_options(), before)

    def test_context(self):
        from microbialkitchen import get_options, options

        with options(ph_bounds=(2.0, 12.0), ph_maxiter=50) as opts:
            self.assertEqual(opts.ph_bounds, (2.0, 12.0))
            self.assertEqual(get_options().ph_maxiter, 50)
        self.assertEqual(get_options().ph_bounds, (0.0, 14.0))
        self.assertEqual(get_options().ph_maxiter, 100)

        # Restored after an error too.
        with self.assertRaises(KeyError):
            with options(ph_xtol=1e-6):
                raise KeyError('x')
        self.assertEqual(get_options().ph_xtol, 1e-12)
