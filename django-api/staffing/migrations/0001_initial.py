from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Document",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("partition", models.CharField(blank=True, default="", max_length=100)),
                ("collection", models.CharField(max_length=50)),
                ("doc_id", models.CharField(max_length=200)),
                ("data", models.JSONField(default=dict)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["partition", "collection", "doc_id"],
                "indexes": [
                    models.Index(fields=["partition", "collection"], name="document_partition_coll_idx"),
                    models.Index(fields=["collection"], name="document_collection_idx"),
                ],
            },
        ),
        migrations.AddConstraint(
            model_name="document",
            constraint=models.UniqueConstraint(
                fields=("partition", "collection", "doc_id"), name="unique_document_per_collection"
            ),
        ),
    ]
