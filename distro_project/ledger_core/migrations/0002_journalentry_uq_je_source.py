from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("ledger_core", "0001_initial"),
    ]

    operations = [
        migrations.AddConstraint(
            model_name="journalentry",
            constraint=models.UniqueConstraint(
                condition=models.Q(("source_id__isnull", False), models.Q(("source_type", ""), _negated=True)),
                fields=("source_type", "source_id", "entry_type"),
                name="uq_je_source",
            ),
        ),
    ]
