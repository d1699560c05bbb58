import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('contenttypes', '0002_remove_content_type_name'),
        ('projects', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='AuthorizationMatrix',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('approval_level', models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ('threshold_min', models.DecimalField(decimal_places=2, default=0, max_digits=15, validators=[django.core.validators.MinValueValidator(0)])),
                ('threshold_max', models.DecimalField(blank=True, decimal_places=2, max_digits=15, null=True)),
                ('approver_role', models.CharField(choices=[('requester', 'Requester'), ('procurement', 'Procurement'), ('approver', 'Approver'), ('admin', 'Admin')], max_length=20)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('approver_user', models.ForeignKey(blank=True, help_text='Optional named approver in addition to the role', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='authorization_rules', to=settings.AUTH_USER_MODEL)),
                ('project', models.ForeignKey(blank=True, help_text='Empty for the default rules shared by all projects', null=True, on_delete=django.db.models.deletion.CASCADE, related_name='authorization_rules', to='projects.project')),
            ],
            options={
                'db_table': 'authorization_matrix',
                'ordering': ['project_id', 'approval_level', 'threshold_min'],
                'indexes': [models.Index(fields=['project', 'is_active'], name='auth_matrix_project_idx')],
            },
        ),
        migrations.CreateModel(
            name='ApprovalWorkflowInstance',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('object_id', models.PositiveBigIntegerField()),
                ('amount', models.DecimalField(decimal_places=2, default=0, max_digits=15)),
                ('required_levels', models.JSONField(blank=True, default=list)),
                ('current_level', models.PositiveIntegerField(default=0)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('in_progress', 'In Progress'), ('approved', 'Approved'), ('rejected', 'Rejected'), ('cancelled', 'Cancelled')], default='pending', max_length=15)),
                ('started_at', models.DateTimeField(auto_now_add=True)),
                ('finished_at', models.DateTimeField(blank=True, null=True)),
                ('completed_stage_count', models.PositiveIntegerField(default=0)),
                ('content_type', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to='contenttypes.contenttype')),
            ],
            options={
                'db_table': 'approval_workflow_instance',
                'indexes': [models.Index(fields=['content_type', 'object_id'], name='approval_wf_object_idx'), models.Index(fields=['status', 'current_level'], name='approval_wf_status_idx')],
            },
        ),
        migrations.CreateModel(
            name='ApprovalWorkflowStageInstance',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('approval_level', models.PositiveIntegerField()),
                ('required_roles', models.JSONField(blank=True, default=list)),
                ('approver_user_ids', models.JSONField(blank=True, default=list)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('active', 'Active'), ('completed', 'Completed'), ('cancelled', 'Cancelled')], default='pending', max_length=12)),
                ('activated_at', models.DateTimeField(blank=True, null=True)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('workflow_instance', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='stage_instances', to='approval.approvalworkflowinstance')),
            ],
            options={
                'db_table': 'approval_workflow_stage_instance',
                'ordering': ['workflow_instance', 'approval_level'],
                'indexes': [models.Index(fields=['workflow_instance', 'status'], name='approval_stage_status_idx')],
            },
        ),
        migrations.CreateModel(
            name='ApprovalAction',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action', models.CharField(choices=[('approve', 'Approve'), ('reject', 'Reject'), ('comment', 'Comment')], max_length=10)),
                ('comment', models.TextField(blank=True, default='')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('stage_instance', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='actions', to='approval.approvalworkflowstageinstance')),
                ('user', models.ForeignKey(blank=True, help_text='Null for system actions', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='approval_actions', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'approval_action',
                'ordering': ['created_at', 'id'],
                'indexes': [models.Index(fields=['stage_instance', 'action'], name='approval_action_stage_idx')],
            },
        ),
    ]
